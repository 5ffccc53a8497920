# sgpm/config/conexion.py
import asyncio
import logging
import os
from contextlib import asynccontextmanager

import httpx

logger = logging.getLogger(__name__)

# -------------------------------------------------------------------
# CONFIGURACIÓN DE LA API DEL BACKEND SGPM
# -------------------------------------------------------------------
API_CONFIG = {
    "base_url": os.getenv("SGPM_API_URL", "http://localhost:3000/api"),
    "timeout":  os.getenv("SGPM_API_TIMEOUT", 10),
}


def _get_params():
    """Devuelve los parámetros correctos para httpx.AsyncClient."""
    params = API_CONFIG.copy()
    params["base_url"] = str(params["base_url"]).rstrip("/")
    params["timeout"] = float(params.get("timeout", 10))
    return params


def get_auth_headers(token: str | None) -> dict:
    headers = {"Accept": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


class HttpError(Exception):
    """Fallo de una llamada remota (red o respuesta no 2xx)."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def __repr__(self):
        return f"HttpError({self.status_code}, {self.message!r})"


# -------------------------------------------------------------------
# CONTEXT MANAGER PARA EL CLIENTE HTTP
# -------------------------------------------------------------------
@asynccontextmanager
async def api_conn(client: httpx.AsyncClient | None = None):
    """
    Entrega un cliente HTTP listo para usar.
    Si se recibe un cliente externo se reutiliza y NO se cierra.
    """
    if client is not None:
        yield client
        return

    params = _get_params()
    cnx = httpx.AsyncClient(base_url=params["base_url"], timeout=params["timeout"])
    try:
        yield cnx
    finally:
        await cnx.aclose()


def _mensaje_error(response: httpx.Response) -> str:
    """Extrae el mensaje del cuerpo JSON de error ({error} o {message})."""
    try:
        cuerpo = response.json()
    except ValueError:
        cuerpo = None

    if isinstance(cuerpo, dict):
        for campo in ("error", "message"):
            valor = cuerpo.get(campo)
            if isinstance(valor, str) and valor.strip():
                return valor

    return f"Error {response.status_code}: {response.reason_phrase}"


# -------------------------------------------------------------------
# PETICIÓN GENÉRICA: fetch_json
# -------------------------------------------------------------------
async def fetch_json(
    method: str,
    path: str,
    token: str | None = None,
    *,
    params: dict | None = None,
    json: dict | None = None,
    files: dict | None = None,
    data: dict | None = None,
    client: httpx.AsyncClient | None = None,
):
    """
    Ejecuta la petición y devuelve el cuerpo JSON (o None si viene vacío).
    Cualquier fallo se convierte en HttpError.
    """
    query = {k: v for k, v in (params or {}).items() if v is not None and v != ""}

    try:
        async with api_conn(client) as cnx:
            response = await cnx.request(
                method,
                path,
                params=query or None,
                json=json,
                files=files,
                data=data,
                headers=get_auth_headers(token),
            )
    except httpx.TimeoutException as err:
        raise HttpError(0, f"Tiempo de espera agotado: {method} {path}") from err
    except httpx.HTTPError as err:
        raise HttpError(0, f"No se pudo conectar con el servidor: {err}") from err

    if not response.is_success:
        mensaje = _mensaje_error(response)
        logger.warning("%s %s -> %s %s", method, path, response.status_code, mensaje)
        raise HttpError(response.status_code, mensaje)

    if not response.content:
        return None

    try:
        return response.json()
    except ValueError as err:
        raise HttpError(response.status_code, "Respuesta inválida del servidor") from err


# -------------------------------------------------------------------
# RECURSOS: fetch_resource
# -------------------------------------------------------------------
# tipo de recurso -> (ruta, clave de la colección en el payload)
RESOURCES = {
    "planes":     ("/plans/all", "planes"),
    "usuarios":   ("/docentes", "docentes"),
    "facultades": ("/schools", "schools"),
    "auditoria":  ("/auditoria/logs", "logs"),
    "dashboard":  ("/director/counts", None),
}


async def fetch_resource(
    kind: str,
    token: str | None,
    params: dict | None = None,
    client: httpx.AsyncClient | None = None,
):
    """GET del recurso `kind`, desenvolviendo su colección si la tiene."""
    if kind not in RESOURCES:
        raise ValueError(f"Recurso desconocido: {kind}")

    path, clave = RESOURCES[kind]
    payload = await fetch_json("GET", path, token, params=params, client=client)

    if clave is None:
        return payload
    if isinstance(payload, dict):
        return payload.get(clave) or []
    return []


# -------------------------------------------------------------------
# CONCURRENCIA
# -------------------------------------------------------------------
async def gather(*aws):
    """
    Lanza todas las peticiones a la vez y espera a que terminen todas.
    Si alguna falló, relanza el primer error después de que el resto acabe.
    """
    resultados = await asyncio.gather(*aws, return_exceptions=True)
    for resultado in resultados:
        if isinstance(resultado, BaseException):
            raise resultado
    return list(resultados)


def run(coro):
    """Ejecuta una corrutina desde el código síncrono de Streamlit."""
    return asyncio.run(coro)
