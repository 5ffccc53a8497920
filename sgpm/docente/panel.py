# sgpm/docente/panel.py

import pandas as pd
import streamlit as st

from sgpm.auth.navegacion import DOCENTE
from sgpm.auth.rbac import require_user_role
from sgpm.config.conexion import HttpError, gather, run
from sgpm.servicios import evidencias, planes
from sgpm.utils.estado import refrescar, toast_error

ESTADOS_ACCION = ("pendiente", "en_progreso", "completada")


# -------------------------------------------------------
# Helpers generales
# -------------------------------------------------------
def _estado_normalizado(plan: dict) -> str:
    return "".join((plan.get("estado") or "").lower().split())


def resumen_planes(lista: list) -> dict:
    """Cuenta planes completados y en progreso según su estado."""
    completados = 0
    en_progreso = 0
    for plan in lista:
        estado = _estado_normalizado(plan)
        if "completado" in estado or "cerrado" in estado:
            completados += 1
        elif "progreso" in estado or estado == "abierto":
            en_progreso += 1
    return {"total": len(lista), "completados": completados, "en_progreso": en_progreso}


def _cargar_mis_planes(session):
    refrescar(
        st.session_state,
        "docente_planes",
        lambda: run(planes.mis_planes(session.token)),
        toast_error,
        "Error al cargar tus planes",
    )
    return st.session_state.get("docente_planes") or []


def _selector_plan(lista: list, key: str) -> dict | None:
    opciones = {f"{p.get('titulo')} — {p.get('estado')}": p for p in lista}
    etiqueta = st.selectbox("Plan", list(opciones.keys()), key=key)
    return opciones.get(etiqueta)


# -------------------------------------------------------
# Sección: Dashboard
# -------------------------------------------------------
@require_user_role(DOCENTE)
def docente_dashboard(session):
    st.title(f"Hola, {session.user.nombre}")

    lista = _cargar_mis_planes(session)
    resumen = resumen_planes(lista)

    c1, c2, c3 = st.columns(3)
    c1.metric("Mis planes", resumen["total"])
    c2.metric("En progreso", resumen["en_progreso"])
    c3.metric("Completados", resumen["completados"])

    if not lista:
        st.info("No tienes planes asignados.")
        return

    st.markdown("### Planes recientes")
    recientes = sorted(lista, key=lambda p: p.get("updatedAt") or "", reverse=True)[:5]
    for plan in recientes:
        progreso = int(plan.get("progreso") or 0)
        st.write(f"**{plan.get('titulo')}** — {plan.get('estado')}")
        st.progress(min(max(progreso, 0), 100) / 100)


# -------------------------------------------------------
# Sección: Mis planes
# -------------------------------------------------------
@require_user_role(DOCENTE)
def mis_planes(session):
    st.title("Mis planes de mejoramiento")

    lista = _cargar_mis_planes(session)
    if not lista:
        st.info("No tienes planes asignados.")
        return

    st.dataframe(
        pd.DataFrame(
            [
                {
                    "Título": p.get("titulo"),
                    "Estado": p.get("estado"),
                    "Espacio académico": p.get("espacioAcademico"),
                    "Fecha límite": (p.get("fechaLimite") or "")[:10],
                    "Progreso": p.get("progreso"),
                }
                for p in lista
            ]
        ),
        hide_index=True,
        use_container_width=True,
    )

    st.markdown("---")
    plan = _selector_plan(lista, "doc_plan_detalle")
    if not plan:
        return

    try:
        detalle, acciones, aprobaciones = run(
            gather(
                planes.obtener(session.token, plan["id"]),
                planes.acciones(session.token, plan["id"]),
                planes.aprobaciones(session.token, plan["id"]),
            )
        )
    except HttpError as e:
        toast_error(f"Error al cargar el detalle del plan: {e.message}")
        return

    st.markdown(f"### {detalle.get('titulo') or plan.get('titulo')}")
    st.write(detalle.get("descripcion") or plan.get("descripcion") or "")
    if detalle.get("motivo"):
        st.caption(f"Motivo: {detalle['motivo']}")

    st.markdown("#### Acciones")
    if acciones:
        st.dataframe(
            pd.DataFrame(acciones, columns=["descripcion", "estado", "fechaInicio", "fechaFin", "responsable"]),
            hide_index=True,
            use_container_width=True,
        )
        _estado_accion(session, acciones)
    else:
        st.info("Este plan aún no tiene acciones.")

    _nueva_accion(session, plan, f"{session.user.nombre} {session.user.apellido}".strip())

    st.markdown("#### Aprobaciones")
    for aprobacion in aprobaciones:
        icono = "✅" if aprobacion.get("aprobado") else "❌"
        st.write(f"{icono} {aprobacion.get('comentarios') or 'Sin comentarios'}")


def _estado_accion(session, acciones: list):
    opciones = {a.get("descripcion") or a["id"]: a for a in acciones}
    c1, c2, c3 = st.columns([2, 1, 1])
    etiqueta = c1.selectbox("Acción", list(opciones.keys()), key="doc_accion_estado")
    estado = c2.selectbox("Nuevo estado", ESTADOS_ACCION, key="doc_nuevo_estado")
    if c3.button("Actualizar"):
        try:
            run(planes.cambiar_estado_accion(session.token, opciones[etiqueta]["id"], estado))
            st.success("Estado de la acción actualizado.")
            st.rerun()
        except HttpError as e:
            toast_error(f"No se pudo actualizar la acción: {e.message}")


def _nueva_accion(session, plan: dict, responsable: str):
    with st.expander("Agregar acción"):
        with st.form("form_nueva_accion", clear_on_submit=True):
            descripcion = st.text_area("Descripción")
            c1, c2 = st.columns(2)
            inicio = c1.date_input("Fecha de inicio")
            fin = c2.date_input("Fecha de fin")
            enviar = st.form_submit_button("Agregar")

    if not enviar:
        return
    if not descripcion.strip():
        st.warning("La descripción es obligatoria.")
        return
    if fin < inicio:
        st.warning("La fecha de fin no puede ser anterior a la de inicio.")
        return

    try:
        run(
            planes.crear_accion(
                session.token, plan["id"], descripcion.strip(), inicio.isoformat(), fin.isoformat(), responsable
            )
        )
        st.success("Acción agregada.")
        st.rerun()
    except HttpError as e:
        toast_error(f"No se pudo agregar la acción: {e.message}")


# -------------------------------------------------------
# Sección: Evidencias
# -------------------------------------------------------
@require_user_role(DOCENTE)
def evidencias_docente(session):
    st.title("Evidencias")

    lista = _cargar_mis_planes(session)
    if not lista:
        st.info("No tienes planes asignados.")
        return

    plan = _selector_plan(lista, "doc_plan_evidencias")
    if not plan:
        return

    acciones = plan.get("acciones")
    if acciones is None:
        try:
            acciones = run(planes.acciones(session.token, plan["id"]))
        except HttpError as e:
            toast_error(f"Error al cargar acciones: {e.message}")
            return

    if not acciones:
        st.info("Este plan aún no tiene acciones para registrar evidencias.")
        return

    opciones = {a.get("descripcion") or a["id"]: a for a in acciones}
    etiqueta = st.selectbox("Acción", list(opciones.keys()), key="doc_accion")
    accion = opciones[etiqueta]

    with st.form("form_evidencia", clear_on_submit=True):
        archivo = st.file_uploader("Archivo de evidencia")
        comentario = st.text_area("Comentario (opcional)")
        enviar = st.form_submit_button("Subir evidencia", type="primary")

    if enviar:
        if archivo is None:
            st.warning("Selecciona un archivo.")
        else:
            try:
                run(
                    evidencias.subir(
                        session.token,
                        accion["id"],
                        archivo.name,
                        archivo.getvalue(),
                        archivo.type,
                        comentario.strip() or None,
                    )
                )
                st.success("Evidencia subida correctamente.")
            except HttpError as e:
                toast_error(f"Error al subir evidencia: {e.message}")

    st.markdown("### Evidencias registradas")
    try:
        registradas = run(evidencias.por_accion(session.token, accion["id"]))
    except HttpError as e:
        toast_error(f"Error al obtener evidencias: {e.message}")
        return

    if not registradas:
        st.info("Esta acción no tiene evidencias.")
        return

    st.dataframe(
        pd.DataFrame(
            [
                {
                    "Archivo": ev.get("filename") or ev.get("nombreArchivo"),
                    "Comentario": ev.get("comentario"),
                    "Fecha": (ev.get("createdAt") or ev.get("fechaSubida") or "")[:10],
                }
                for ev in registradas
            ]
        ),
        hide_index=True,
        use_container_width=True,
    )
