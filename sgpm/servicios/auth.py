# sgpm/servicios/auth.py
from sgpm.config.conexion import fetch_json


async def login_user(email: str, password: str, client=None) -> dict:
    """
    POST /auth/login.
    Devuelve {"message", "user", "token"}; no toca la sesión local.
    """
    return await fetch_json(
        "POST",
        "/auth/login",
        json={"email": email, "password": password},
        client=client,
    )


async def cambiar_contrasena(token: str, actual: str, nueva: str, confirmacion: str, client=None) -> dict:
    resultado = await fetch_json(
        "POST",
        "/auth/change-password",
        token,
        json={
            "currentPassword": actual,
            "newPassword": nueva,
            "confirmPassword": confirmacion,
        },
        client=client,
    )
    return resultado or {}
