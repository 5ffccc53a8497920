# app.py
import logging

import streamlit as st

from sgpm.admin.panel import (
    admin_dashboard,
    auditoria_panel,
    gestion_facultades,
    gestion_usuarios,
    reportes_admin,
)
from sgpm.auth.cuenta import cambiar_contrasena_form
from sgpm.auth.login import login_screen
from sgpm.auth.navegacion import DASHBOARD_PATH, navigation_items, view_for
from sgpm.auth.rbac import clear_session, initials, load_session
from sgpm.decano import panel as decano
from sgpm.director import panel as director
from sgpm.docente import panel as docente

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

st.set_page_config(page_title="SGPM", layout="wide")

# identificador de vista -> función que la dibuja
VIEWS = {
    "director.dashboard": director.director_dashboard,
    "director.asignar_planes": director.asignar_planes,
    "director.seguimiento": director.seguimiento,
    "director.metricas": director.metricas,
    "director.estrategia": director.estrategia,
    "docente.dashboard": docente.docente_dashboard,
    "docente.planes": docente.mis_planes,
    "docente.evidencias": docente.evidencias_docente,
    "decano.dashboard": decano.decano_dashboard,
    "decano.planes": decano.revisar_planes,
    "decano.docentes": decano.docentes,
    "decano.reportes": decano.reportes,
    "admin.dashboard": admin_dashboard,
    "admin.usuarios": gestion_usuarios,
    "admin.facultades": gestion_facultades,
    "admin.reportes": reportes_admin,
    "admin.auditoria": auditoria_panel,
}


def router():
    session = load_session()

    if session is None:
        # Sin sesión → mostramos login
        login_screen()
        return

    user = session.user
    items = navigation_items(user.role)

    # Con sesión → barra lateral con usuario y menú del rol
    with st.sidebar:
        st.markdown(f"### {initials(user)}")
        st.write(f"**{user.nombre_completo}**")
        st.caption(f"{user.role} - {user.facultad}")

        ruta = DASHBOARD_PATH
        if items:
            etiquetas = {item.label: item.target_path for item in items}
            etiqueta = st.radio("Navegación", list(etiquetas.keys()), key="nav_selector")
            ruta = etiquetas[etiqueta]

        with st.expander("Cambiar contraseña"):
            cambiar_contrasena_form(session)

        if st.button("Cerrar sesión"):
            clear_session(redirect=True)

    vista = VIEWS.get(view_for(user.role, ruta))
    if vista is None:
        st.warning(f"Rol sin vistas asignadas: {user.role or 'desconocido'}")
        return

    vista()


if __name__ == "__main__":
    router()
