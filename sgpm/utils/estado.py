# sgpm/utils/estado.py
import logging
from collections.abc import Callable, MutableMapping

import streamlit as st

from sgpm.config.conexion import HttpError

logger = logging.getLogger(__name__)


def refrescar(
    estado: MutableMapping,
    clave: str,
    cargar: Callable[[], object],
    notificar: Callable[[str], None],
    prefijo: str = "Error al cargar datos",
) -> bool:
    """
    Ejecuta `cargar()` y guarda el resultado en estado[clave].
    Si la llamada remota falla se notifica el mensaje del servidor
    y estado[clave] conserva lo que tenía.
    """
    try:
        datos = cargar()
    except HttpError as err:
        logger.warning("%s (%s): %s", prefijo, err.status_code, err.message)
        notificar(f"{prefijo}: {err.message}")
        return False

    estado[clave] = datos
    return True


def toast_error(mensaje: str) -> None:
    """Notificación no bloqueante en la esquina de la app."""
    st.toast(mensaje, icon="⚠️")
