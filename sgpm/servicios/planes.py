# sgpm/servicios/planes.py
from sgpm.config.conexion import fetch_json, fetch_resource


def _coleccion(payload, clave: str) -> list:
    if isinstance(payload, dict):
        return payload.get(clave) or []
    if isinstance(payload, list):
        return payload
    return []


# -------------------------------------------------------
# Consultas
# -------------------------------------------------------
async def obtener_todos(token: str, client=None) -> list:
    return await fetch_resource("planes", token, client=client)


async def mis_planes(token: str, client=None) -> list:
    """Planes asignados al docente en sesión."""
    payload = await fetch_json("GET", "/plans/mis-planes", token, client=client)
    return _coleccion(payload, "planes")


async def rechazados(token: str, client=None) -> list:
    payload = await fetch_json("GET", "/plans/rechazados", token, client=client)
    return _coleccion(payload, "planes")


async def obtener(token: str, plan_id: str, client=None) -> dict:
    payload = await fetch_json("GET", f"/plans/{plan_id}", token, client=client)
    if isinstance(payload, dict) and isinstance(payload.get("plan"), dict):
        return payload["plan"]
    return payload or {}


async def pendientes_decano(token: str, client=None) -> list:
    payload = await fetch_json("GET", "/decano/planes-pendientes", token, client=client)
    return _coleccion(payload, "planes")


# -------------------------------------------------------
# Flujo del director
# -------------------------------------------------------
async def crear(token: str, titulo: str, descripcion: str, docente_id: str, incidencia_id: str | None = None, client=None):
    cuerpo = {"titulo": titulo, "descripcion": descripcion, "docenteId": docente_id}
    if incidencia_id:
        cuerpo["incidenciaId"] = incidencia_id
    return await fetch_json("POST", "/plans", token, json=cuerpo, client=client)


async def aprobar(token: str, plan_id: str, client=None):
    return await fetch_json("POST", f"/plans/{plan_id}/aprobar", token, client=client)


async def cerrar(token: str, plan_id: str, client=None):
    return await fetch_json("POST", f"/plans/{plan_id}/cerrar", token, client=client)


async def reenviar_decano(token: str, plan_id: str, client=None):
    return await fetch_json("POST", f"/plans/{plan_id}/reenviar-decano", token, client=client)


# -------------------------------------------------------
# Revisión del decano
# -------------------------------------------------------
async def decidir_decano(token: str, plan_id: str, aprobado: bool, comentarios: str = "", client=None):
    """Aprueba o rechaza el plan; el rechazo exige comentarios en la vista."""
    return await fetch_json(
        "POST",
        f"/decano/planes/{plan_id}/aprobar",
        token,
        json={"aprobado": aprobado, "comentarios": comentarios or ""},
        client=client,
    )


async def aprobaciones(token: str, plan_id: str, client=None) -> list:
    payload = await fetch_json("GET", f"/aprobaciones/plan/{plan_id}", token, client=client)
    return _coleccion(payload, "aprobaciones")


# -------------------------------------------------------
# Acciones del plan
# -------------------------------------------------------
async def acciones(token: str, plan_id: str, client=None) -> list:
    payload = await fetch_json("GET", f"/acciones/plan/{plan_id}", token, client=client)
    return _coleccion(payload, "acciones")


async def crear_accion(token: str, plan_id: str, descripcion: str, fecha_inicio: str, fecha_fin: str, responsable: str, client=None):
    return await fetch_json(
        "POST",
        "/acciones",
        token,
        json={
            "planId": plan_id,
            "descripcion": descripcion,
            "fechaInicio": fecha_inicio,
            "fechaFin": fecha_fin,
            "responsable": responsable,
        },
        client=client,
    )


async def cambiar_estado_accion(token: str, accion_id: str, estado: str, client=None):
    return await fetch_json(
        "PATCH", f"/acciones/{accion_id}/estado", token, json={"estado": estado}, client=client
    )
