# sgpm/servicios/usuarios.py
from sgpm.config.conexion import fetch_json, fetch_resource


async def listar_docentes(token: str, include_inactive: bool = False, school_id: str | None = None, client=None) -> list:
    params = {
        "includeInactive": "true" if include_inactive else None,
        "schoolId": school_id,
    }
    return await fetch_resource("usuarios", token, params=params, client=client)


async def crear_usuario(token: str, nombre: str, apellido: str, email: str, password: str, school_id: str | None, role: str | None = None, client=None):
    """Registra el usuario; el backend envía la contraseña temporal por correo."""
    cuerpo = {
        "nombre": nombre,
        "apellido": apellido,
        "email": email,
        "password": password,
        "schoolId": school_id,
        "sendWelcomeEmail": True,
    }
    if role:
        cuerpo["role"] = role
    return await fetch_json("POST", "/auth/register", token, json=cuerpo, client=client)


async def actualizar_usuario(token: str, user_id: str, cambios: dict, client=None) -> dict:
    payload = await fetch_json("PUT", f"/auth/users/{user_id}", token, json=cambios, client=client)
    if isinstance(payload, dict):
        return payload.get("user") or {}
    return {}


async def desactivar_usuario(token: str, user_id: str, client=None):
    return await fetch_json("PATCH", f"/auth/users/{user_id}/deactivate", token, client=client)


async def activar_usuario(token: str, user_id: str, client=None):
    return await fetch_json("PATCH", f"/auth/users/{user_id}/activate", token, client=client)
