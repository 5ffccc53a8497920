# sgpm/servicios/evidencias.py
from sgpm.config.conexion import fetch_json


async def subir(token: str, accion_id: str, nombre_archivo: str, contenido: bytes, tipo: str | None = None, comentario: str | None = None, client=None) -> dict:
    """Sube un archivo como evidencia de una acción (multipart/form-data)."""
    data = {"accionId": accion_id}
    if comentario:
        data["comentario"] = comentario

    archivo = (nombre_archivo, contenido, tipo or "application/octet-stream")
    payload = await fetch_json(
        "POST", "/evidencias", token, files={"file": archivo}, data=data, client=client
    )
    if isinstance(payload, dict):
        return payload.get("evidencia") or {}
    return {}


async def por_accion(token: str, accion_id: str, client=None) -> list:
    payload = await fetch_json("GET", f"/evidencias/accion/{accion_id}", token, client=client)
    if isinstance(payload, dict):
        return payload.get("evidencias") or []
    return []
