# sgpm/servicios/dashboard.py
from sgpm.config.conexion import fetch_json, fetch_resource


# ==========================
#  Director / Administrador
# ==========================

async def director_counts(token: str, client=None) -> dict:
    """
    GET /director/counts:
    {schools, docentes, planes, planesPorEscuela: [{schoolName, totalPlanes,
     docentes, planesCompletados, calidad}]}
    """
    payload = await fetch_resource("dashboard", token, client=client)
    return payload if isinstance(payload, dict) else {}


def resumen_admin(counts: dict) -> dict:
    """Totales del panel de administración derivados de /director/counts."""
    total_planes = int(counts.get("planes") or 0)
    completados = sum(
        int(e.get("planesCompletados") or 0) for e in counts.get("planesPorEscuela") or []
    )
    activos = total_planes - completados
    return {
        "totalDocentes": int(counts.get("docentes") or 0),
        "planesActivos": activos,
        "planesPendientes": activos,
        "planesCompletados": completados,
        "totalFacultades": int(counts.get("schools") or 0),
    }


async def admin_stats(token: str, client=None) -> dict:
    return resumen_admin(await director_counts(token, client=client))


# ==========================
#  Decano
# ==========================

async def decano_stats(token: str, client=None) -> dict:
    return await fetch_json("GET", "/decano/stats", token, client=client) or {}


async def decano_reportes(token: str, client=None) -> dict:
    return await fetch_json("GET", "/decano/reportes", token, client=client) or {}


async def decano_departamentos(token: str, client=None) -> list:
    payload = await fetch_json("GET", "/decano/departamentos", token, client=client)
    if isinstance(payload, dict):
        return payload.get("departamentos") or []
    return payload or []


# ==========================
#  Alertas y estadísticas generales
# ==========================

async def alertas(token: str, client=None) -> list:
    return await fetch_json("GET", "/dashboard/alertas", token, client=client) or []


async def estadisticas(token: str, client=None) -> dict:
    return await fetch_json("GET", "/dashboard/estadisticas", token, client=client) or {}


async def departamentos(token: str, client=None) -> list:
    return await fetch_json("GET", "/dashboard/departamentos", token, client=client) or []
