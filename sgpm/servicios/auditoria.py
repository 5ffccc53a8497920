# sgpm/servicios/auditoria.py
from sgpm.config.conexion import fetch_json


async def obtener_logs(token: str, params: dict | None = None, client=None) -> dict:
    """
    GET /auditoria/logs con filtros (entidad, accion, usuarioId,
    fechaInicio, fechaFin, busqueda, limit, offset).
    Devuelve {"logs", "total", "limit", "offset"}.
    """
    payload = await fetch_json("GET", "/auditoria/logs", token, params=params, client=client)
    payload = payload if isinstance(payload, dict) else {}
    return {
        "logs": payload.get("logs") or [],
        "total": int(payload.get("total") or 0),
        "limit": payload.get("limit"),
        "offset": payload.get("offset"),
    }


async def obtener_estadisticas(token: str, fecha_inicio: str | None = None, fecha_fin: str | None = None, client=None) -> dict:
    payload = await fetch_json(
        "GET",
        "/auditoria/estadisticas",
        token,
        params={"fechaInicio": fecha_inicio, "fechaFin": fecha_fin},
        client=client,
    )
    return payload or {}


async def actividad_reciente(token: str, limit: int = 10, client=None) -> list:
    payload = await fetch_json(
        "GET", "/auditoria/actividad-reciente", token, params={"limit": limit}, client=client
    )
    if isinstance(payload, dict):
        return payload.get("actividades") or []
    return []
