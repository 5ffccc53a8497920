# sgpm/servicios/incidencias.py
from sgpm.config.conexion import fetch_json

ESTADOS = ("pendiente", "revisado", "archivado")


async def listar(token: str, client=None) -> list:
    payload = await fetch_json("GET", "/incidencias", token, client=client)
    if isinstance(payload, dict):
        return payload.get("incidencias") or []
    return payload or []


async def crear(token: str, descripcion: str, docente_id: str, client=None):
    return await fetch_json(
        "POST",
        "/incidencias",
        token,
        json={"descripcion": descripcion, "docenteId": docente_id},
        client=client,
    )


async def cambiar_estado(token: str, incidencia_id: str, estado: str, client=None):
    return await fetch_json(
        "PATCH", f"/incidencias/{incidencia_id}/estado", token, json={"estado": estado}, client=client
    )
