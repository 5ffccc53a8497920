# sgpm/auth/login.py
import logging

import streamlit as st

from sgpm.auth.rbac import save_session
from sgpm.auth.validaciones import validate_email
from sgpm.config.conexion import HttpError, run
from sgpm.servicios.auth import login_user

logger = logging.getLogger(__name__)


def login_screen():
    st.title("SGPM — Iniciar sesión")
    st.caption("Sistema de Gestión de Planes de Mejoramiento")

    with st.form("form_login"):
        email = st.text_input("Correo institucional", placeholder="nombre@usantoto.edu.co")
        password = st.text_input("Contraseña", type="password")
        ingresar = st.form_submit_button("Ingresar", type="primary")

    if not ingresar:
        return

    error_email = validate_email(email)
    if error_email:
        st.error(error_email)
        return

    if not password.strip():
        st.error("La contraseña es obligatoria.")
        return

    try:
        with st.spinner("Verificando credenciales..."):
            data = run(login_user(email.strip(), password.strip()))
    except HttpError as e:
        st.error(e.message or "Error al iniciar sesión. Intenta nuevamente.")
        return

    token = (data or {}).get("token")
    user = (data or {}).get("user")
    if not token or not isinstance(user, dict):
        st.error("Respuesta de inicio de sesión incompleta.")
        return

    # Guardamos lo que necesitamos en sesión
    save_session(token, user)
    logger.info("Sesión iniciada: %s (%s)", user.get("email"), user.get("role"))

    st.success("Ingreso exitoso.")
    st.rerun()
