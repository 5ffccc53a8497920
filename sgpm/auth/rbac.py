# sgpm/auth/rbac.py
import functools
import json
import logging
from collections.abc import MutableMapping
from dataclasses import asdict, dataclass

import streamlit as st
from streamlit.runtime.scriptrunner import get_script_run_ctx

logger = logging.getLogger(__name__)

# Claves donde se guardan el token y el perfil (como texto JSON)
TOKEN_KEY = "token"
USER_KEY = "user"


# ========== Modelo ==========

@dataclass(frozen=True)
class Profile:
    id: str
    email: str
    nombre: str
    apellido: str
    facultad: str
    role: str

    @classmethod
    def from_dict(cls, data: dict) -> "Profile":
        def texto(campo):
            valor = data.get(campo)
            return "" if valor is None else str(valor)

        return cls(
            id=texto("id"),
            email=texto("email"),
            nombre=texto("nombre"),
            apellido=texto("apellido"),
            facultad=texto("facultad"),
            role=texto("role").strip(),
        )

    @property
    def nombre_completo(self) -> str:
        return f"{self.nombre} {self.apellido}".strip()


@dataclass(frozen=True)
class Session:
    token: str
    user: Profile


# ========== Almacenamiento ==========

def _en_streamlit() -> bool:
    """True dentro de una ejecución del script de Streamlit."""
    return get_script_run_ctx(suppress_warning=True) is not None


def _storage(storage: MutableMapping | None = None) -> MutableMapping | None:
    """
    Devuelve el almacén de sesión: el recibido o st.session_state
    si hay una ejecución de Streamlit activa. None si no hay ninguno.
    """
    if storage is not None:
        return storage
    if _en_streamlit():
        return st.session_state
    return None


# ========== Sesión ==========

def load_session(storage: MutableMapping | None = None) -> Session | None:
    """Devuelve la sesión actual o None si falta o no se puede leer."""
    store = _storage(storage)
    if store is None:
        return None

    token = store.get(TOKEN_KEY)
    raw_user = store.get(USER_KEY)
    if not isinstance(token, str) or not token or not isinstance(raw_user, str):
        return None

    try:
        data = json.loads(raw_user)
    except (ValueError, RecursionError) as err:
        logger.debug("Perfil de sesión ilegible: %s", err)
        return None

    if not isinstance(data, dict):
        logger.debug("Perfil de sesión con formato inesperado: %r", type(data).__name__)
        return None

    return Session(token=token, user=Profile.from_dict(data))


def save_session(token: str, user: dict, storage: MutableMapping | None = None) -> None:
    """Guarda/actualiza el token y el perfil en la sesión."""
    store = _storage(storage)
    if store is None:
        return
    if isinstance(user, Profile):
        user = asdict(user)
    store[TOKEN_KEY] = token
    store[USER_KEY] = json.dumps(user)


def clear_session(redirect: bool = False, storage: MutableMapping | None = None) -> None:
    """
    Elimina la sesión. Con redirect=True vuelve a ejecutar la app
    para que el router muestre el login.
    """
    store = _storage(storage)
    if store is None:
        return

    store.pop(TOKEN_KEY, None)
    store.pop(USER_KEY, None)

    if redirect and _en_streamlit():
        st.rerun()


def is_logged_in(storage: MutableMapping | None = None) -> bool:
    """True si hay una sesión válida."""
    return load_session(storage) is not None


def initials(profile: Profile | None) -> str:
    """Iniciales de nombre y apellido, p. ej. Ana Ruiz -> AR."""
    if profile is None:
        return ""
    nombre = (profile.nombre or "").strip()
    apellido = (profile.apellido or "").strip()
    return f"{nombre[:1]}{apellido[:1]}".upper()


# ========== Decoradores ==========

def require_auth(func):
    """
    Decorador: exige que haya sesión.
    Uso:
        @require_auth
        def pantalla(session):
            ...
    La sesión se pasa como primer argumento a la vista.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        session = load_session()
        if session is None:
            st.error("No hay una sesión activa.")
            st.stop()
        return func(session, *args, **kwargs)

    return wrapper


def require_user_role(*roles_permitidos: str):
    """
    Decorador: exige que el rol del usuario esté en roles_permitidos.
    Uso:
        @require_user_role("Administrador")
        def pantalla_admin(session):
            ...
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            session = load_session()
            if session is None:
                st.error("No hay una sesión activa.")
                st.stop()

            rol_usuario = session.user.role.lower()
            roles_ok = [str(r).strip().lower() for r in roles_permitidos]

            if rol_usuario not in roles_ok:
                st.error("No tiene permiso para ver esta sección.")
                st.stop()

            return func(session, *args, **kwargs)

        return wrapper

    return decorator
