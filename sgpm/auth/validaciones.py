# sgpm/auth/validaciones.py
import re

ALLOWED_DOMAINS = ("usantoto.edu.co", "ustatunja.edu.co")

# Roles que deben quedar asociados a una facultad
ROLES_CON_FACULTAD = ("docente", "decano", "director_academico")

MIN_PASSWORD = 6

_EMAIL_RE = re.compile(r"\S+@\S+\.\S+$")


def validate_email(email: str) -> str | None:
    """Devuelve el mensaje de error o None si el correo es institucional."""
    limpio = (email or "").strip().lower()

    if not limpio:
        return "El campo de correo es obligatorio."
    if limpio.count("@") != 1 or not _EMAIL_RE.search(limpio):
        return "El formato del correo es inválido."

    dominio = limpio.split("@")[1]
    if dominio not in ALLOWED_DOMAINS:
        return f"Solo se permiten correos institucionales ({', '.join(ALLOWED_DOMAINS)})"

    return None


def validar_cambio_contrasena(actual: str, nueva: str, confirmacion: str) -> dict[str, str]:
    """Errores por campo del formulario de cambio de contraseña."""
    errores: dict[str, str] = {}

    if not actual:
        errores["currentPassword"] = "La contraseña actual es requerida"

    if not nueva:
        errores["newPassword"] = "La nueva contraseña es requerida"
    elif len(nueva) < MIN_PASSWORD:
        errores["newPassword"] = f"La contraseña debe tener al menos {MIN_PASSWORD} caracteres"

    if not confirmacion:
        errores["confirmPassword"] = "Debes confirmar la nueva contraseña"
    elif nueva != confirmacion:
        errores["confirmPassword"] = "Las contraseñas no coinciden"

    if actual and actual == nueva:
        errores["newPassword"] = "La nueva contraseña debe ser diferente a la actual"

    return errores


def validar_usuario(nombre_completo: str, email: str, rol: str, facultad: str | None) -> dict[str, str]:
    """Errores por campo del formulario de alta de usuario."""
    errores: dict[str, str] = {}

    if not (nombre_completo or "").strip():
        errores["nombre"] = "El nombre es obligatorio"

    error_email = validate_email(email)
    if error_email:
        errores["email"] = error_email

    if rol in ROLES_CON_FACULTAD and not facultad:
        errores["facultad"] = "Debe seleccionar una facultad para este rol"

    return errores


def separar_nombre(nombre_completo: str) -> tuple[str, str]:
    """
    'Ana María Ruiz' -> ('Ana', 'María Ruiz').
    Con una sola palabra se repite como apellido.
    """
    partes = (nombre_completo or "").split()
    if not partes:
        return "", ""
    return partes[0], " ".join(partes[1:]) or partes[0]
