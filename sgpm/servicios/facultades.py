# sgpm/servicios/facultades.py
from sgpm.config.conexion import fetch_json, fetch_resource


def _cuerpo(nombre: str, decano: str | None, email_decano: str | None) -> dict:
    cuerpo = {"nombre": nombre}
    if decano:
        cuerpo["decano"] = decano
    if email_decano:
        cuerpo["emailDecano"] = email_decano
    return cuerpo


async def listar(token: str, client=None) -> list:
    return await fetch_resource("facultades", token, client=client)


async def crear(token: str, nombre: str, decano: str | None = None, email_decano: str | None = None, client=None) -> dict:
    payload = await fetch_json("POST", "/schools", token, json=_cuerpo(nombre, decano, email_decano), client=client)
    return payload or {}


async def actualizar(token: str, school_id: str, nombre: str, decano: str | None = None, email_decano: str | None = None, client=None) -> dict:
    payload = await fetch_json(
        "PUT", f"/schools/{school_id}", token, json=_cuerpo(nombre, decano, email_decano), client=client
    )
    if isinstance(payload, dict) and isinstance(payload.get("school"), dict):
        return payload["school"]
    return payload or {}


async def eliminar(token: str, school_id: str, client=None):
    return await fetch_json("DELETE", f"/schools/{school_id}", token, client=client)
