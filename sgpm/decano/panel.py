# sgpm/decano/panel.py

import pandas as pd
import streamlit as st

from sgpm.auth.navegacion import DECANO
from sgpm.auth.rbac import require_user_role
from sgpm.config.conexion import HttpError, gather, run
from sgpm.servicios import dashboard, planes, usuarios
from sgpm.utils.estado import refrescar, toast_error
from sgpm.utils.listas import filter_records


def etiqueta_estado(estado: str) -> str:
    """'pendiente_decano' -> 'Pendiente'."""
    limpio = (estado or "").replace("_", " ").replace("decano", "").strip()
    return " ".join(palabra.capitalize() for palabra in limpio.split())


# -------------------------------------------------------
# Sección: Dashboard
# -------------------------------------------------------
@require_user_role(DECANO)
def decano_dashboard(session):
    st.title("Panel del Decano")
    st.caption(session.user.facultad)

    def _cargar():
        return run(
            gather(
                dashboard.decano_stats(session.token),
                planes.pendientes_decano(session.token),
            )
        )

    refrescar(st.session_state, "decano_dashboard", _cargar, toast_error, "Error al cargar el panel")
    stats, pendientes = st.session_state.get("decano_dashboard") or ({}, [])

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Docentes", stats.get("totalDocentes", 0))
    c2.metric("Planes", stats.get("totalPlanes", 0))
    c3.metric("Completados", stats.get("planesCompletados", 0))
    c4.metric("Cumplimiento", f"{stats.get('tasaCumplimiento', 0)}%")

    st.markdown("### Planes pendientes de revisión")
    if not pendientes:
        st.success("No hay planes pendientes.")
        return

    st.dataframe(
        pd.DataFrame(
            [
                {
                    "Título": p.get("titulo"),
                    "Docente": f"{(p.get('docente') or {}).get('nombre', '')} {(p.get('docente') or {}).get('apellido', '')}",
                    "Estado": etiqueta_estado(p.get("estado")),
                }
                for p in pendientes
            ]
        ),
        hide_index=True,
        use_container_width=True,
    )


# -------------------------------------------------------
# Sección: Revisar planes
# -------------------------------------------------------
@require_user_role(DECANO)
def revisar_planes(session):
    st.title("Revisar planes")

    refrescar(
        st.session_state,
        "decano_planes",
        lambda: run(planes.obtener_todos(session.token)),
        toast_error,
        "Error al cargar planes",
    )
    todos = st.session_state.get("decano_planes") or []

    estados = sorted({p.get("estado") for p in todos if p.get("estado")})
    c1, c2 = st.columns([2, 1])
    busqueda = c1.text_input("Buscar por título o docente", key="dec_busqueda")
    estado = c2.selectbox(
        "Estado",
        ["todos"] + estados,
        format_func=lambda e: "Todos" if e == "todos" else etiqueta_estado(e),
        key="dec_estado",
    )

    filtrados = filter_records(
        todos,
        search=busqueda,
        search_fields=("titulo", "descripcion", "docente.nombre", "docente.apellido"),
        equals={"estado": estado},
    )
    if not filtrados:
        st.info("No hay planes que coincidan con los filtros.")
        return

    for plan in filtrados:
        docente = plan.get("docente") or {}
        with st.expander(f"{plan.get('titulo')} — {etiqueta_estado(plan.get('estado'))}"):
            st.write(plan.get("descripcion") or "")
            st.caption(f"Docente: {docente.get('nombre', '')} {docente.get('apellido', '')} ({docente.get('email', '')})")

            comentarios = st.text_area("Comentarios", key=f"dec_com_{plan['id']}")
            c1, c2 = st.columns(2)
            aprobar = c1.button("Aprobar", key=f"dec_apr_{plan['id']}", type="primary")
            rechazar = c2.button("Rechazar", key=f"dec_rec_{plan['id']}")

            if rechazar and not comentarios.strip():
                st.warning("Debes indicar el motivo del rechazo.")
            elif aprobar or rechazar:
                try:
                    run(planes.decidir_decano(session.token, plan["id"], bool(aprobar), comentarios.strip()))
                    st.success("Plan aprobado." if aprobar else "Plan rechazado.")
                    st.rerun()
                except HttpError as e:
                    toast_error(f"Error al registrar la decisión: {e.message}")


# -------------------------------------------------------
# Sección: Docentes
# -------------------------------------------------------
@require_user_role(DECANO)
def docentes(session):
    st.title("Docentes de la facultad")

    refrescar(
        st.session_state,
        "decano_docentes",
        lambda: run(usuarios.listar_docentes(session.token)),
        toast_error,
        "Error al cargar docentes",
    )
    lista = st.session_state.get("decano_docentes") or []

    busqueda = st.text_input("Buscar por nombre, apellido o correo", key="dec_doc_busqueda")
    filtrados = filter_records(lista, search=busqueda, search_fields=("nombre", "apellido", "email"))

    st.caption(f"{len(filtrados)} de {len(lista)} docentes")
    if not filtrados:
        st.info("No se encontraron docentes.")
        return

    st.dataframe(
        pd.DataFrame(
            [
                {
                    "Nombre": f"{d.get('nombre', '')} {d.get('apellido', '')}",
                    "Correo": d.get("email"),
                    "Facultad": (d.get("school") or {}).get("nombre"),
                }
                for d in filtrados
            ]
        ),
        hide_index=True,
        use_container_width=True,
    )


# -------------------------------------------------------
# Sección: Reportes
# -------------------------------------------------------
@require_user_role(DECANO)
def reportes(session):
    st.title("Reportes de la facultad")

    def _cargar():
        return run(
            gather(
                dashboard.decano_reportes(session.token),
                dashboard.decano_departamentos(session.token),
            )
        )

    refrescar(st.session_state, "decano_reportes", _cargar, toast_error, "Error al cargar reportes")
    resumen, departamentos = st.session_state.get("decano_reportes") or ({}, [])

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Planes", resumen.get("totalPlanes", 0))
    c2.metric("Docentes", resumen.get("totalDocentes", 0))
    c3.metric("Completados", resumen.get("planesCompletados", 0))
    c4.metric("Cumplimiento", f"{resumen.get('tasaCumplimiento', 0)}%")

    if not departamentos:
        st.info("No hay datos por departamento.")
        return

    df = pd.DataFrame(departamentos, columns=["nombre", "docentes", "planes", "cumplimiento"])
    df = df.rename(
        columns={
            "nombre": "Departamento",
            "docentes": "Docentes",
            "planes": "Planes",
            "cumplimiento": "Cumplimiento (%)",
        }
    )

    st.markdown("### Cumplimiento por departamento")
    st.bar_chart(df, x="Departamento", y="Cumplimiento (%)")
    st.dataframe(df, hide_index=True, use_container_width=True)
