# sgpm/auth/cuenta.py
import streamlit as st

from sgpm.auth.rbac import Session
from sgpm.auth.validaciones import validar_cambio_contrasena
from sgpm.config.conexion import HttpError, run
from sgpm.servicios.auth import cambiar_contrasena


def cambiar_contrasena_form(session: Session):
    """Formulario de cambio de contraseña; los errores quedan junto a cada campo."""
    with st.form("form_cambiar_contrasena", clear_on_submit=False):
        actual = st.text_input("Contraseña actual", type="password")
        hueco_actual = st.empty()
        nueva = st.text_input("Nueva contraseña", type="password")
        hueco_nueva = st.empty()
        confirmacion = st.text_input("Confirmar nueva contraseña", type="password")
        hueco_confirmacion = st.empty()
        enviar = st.form_submit_button("Cambiar contraseña")

    if not enviar:
        return

    errores = validar_cambio_contrasena(actual, nueva, confirmacion)
    if errores:
        huecos = {
            "currentPassword": hueco_actual,
            "newPassword": hueco_nueva,
            "confirmPassword": hueco_confirmacion,
        }
        for campo, mensaje in errores.items():
            huecos[campo].error(mensaje)
        return

    try:
        resultado = run(cambiar_contrasena(session.token, actual, nueva, confirmacion))
    except HttpError as e:
        st.toast(f"Error al cambiar la contraseña: {e.message}", icon="⚠️")
        return

    st.success(resultado.get("message") or "Contraseña actualizada exitosamente")
