# sgpm/auth/navegacion.py
import re
from dataclasses import dataclass

DIRECTOR = "Director"
DOCENTE = "Docente"
DECANO = "Decano"
ADMINISTRADOR = "Administrador"

ROLES = (DIRECTOR, DOCENTE, DECANO, ADMINISTRADOR)

DASHBOARD = "Dashboard"
DASHBOARD_PATH = "/dashboard"

# Menú de cada rol, en el orden en que se muestra
NAV_ITEMS = {
    DIRECTOR: ("Dashboard", "Asignar Planes", "Seguimiento", "Métricas", "Estrategia"),
    DOCENTE: ("Dashboard", "Mis Planes", "Evidencias"),
    DECANO: ("Dashboard", "Revisar Planes", "Docentes", "Reportes"),
    ADMINISTRADOR: ("Dashboard", "Usuarios", "Facultades", "Reportes Administrador", "Auditoría"),
}

# Vista principal de cada rol
DASHBOARD_VIEWS = {
    DIRECTOR: "director.dashboard",
    DOCENTE: "docente.dashboard",
    DECANO: "decano.dashboard",
    ADMINISTRADOR: "admin.dashboard",
}

# Resto de vistas por rol, indexadas por etiqueta del menú
SECTION_VIEWS = {
    DIRECTOR: {
        "Asignar Planes": "director.asignar_planes",
        "Seguimiento": "director.seguimiento",
        "Métricas": "director.metricas",
        "Estrategia": "director.estrategia",
    },
    DOCENTE: {
        "Mis Planes": "docente.planes",
        "Evidencias": "docente.evidencias",
    },
    DECANO: {
        "Revisar Planes": "decano.planes",
        "Docentes": "decano.docentes",
        "Reportes": "decano.reportes",
    },
    ADMINISTRADOR: {
        "Usuarios": "admin.usuarios",
        "Facultades": "admin.facultades",
        "Reportes Administrador": "admin.reportes",
        "Auditoría": "admin.auditoria",
    },
}


@dataclass(frozen=True)
class NavigationItem:
    label: str
    target_path: str


def _normalizar_rol(role) -> str:
    return role.strip() if isinstance(role, str) else ""


def slugify(label: str) -> str:
    """'Reportes Administrador' -> 'reportes-administrador'."""
    return re.sub(r"\s+", "-", label.lower())


def target_path(label: str) -> str:
    if label == DASHBOARD:
        return DASHBOARD_PATH
    return f"{DASHBOARD_PATH}/{slugify(label)}"


def navigation_for(role) -> tuple[str, ...]:
    """Etiquetas del menú del rol; vacío si el rol no se conoce."""
    return NAV_ITEMS.get(_normalizar_rol(role), ())


def navigation_items(role) -> list[NavigationItem]:
    return [NavigationItem(label, target_path(label)) for label in navigation_for(role)]


def dashboard_for(role) -> str | None:
    """Identificador de la vista principal del rol, o None."""
    return DASHBOARD_VIEWS.get(_normalizar_rol(role))


def view_for(role, path: str) -> str | None:
    """Resuelve la ruta de un ítem del menú del rol a su vista."""
    if path == DASHBOARD_PATH:
        return dashboard_for(role)

    rol = _normalizar_rol(role)
    for item in navigation_items(rol):
        if item.target_path == path:
            return SECTION_VIEWS.get(rol, {}).get(item.label)
    return None
