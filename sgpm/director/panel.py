# sgpm/director/panel.py

import pandas as pd
import streamlit as st

from sgpm.auth.navegacion import DIRECTOR
from sgpm.auth.rbac import require_user_role
from sgpm.config.conexion import HttpError, gather, run
from sgpm.servicios import dashboard, incidencias, planes, usuarios
from sgpm.utils.estado import refrescar, toast_error
from sgpm.utils.listas import filter_records, opciones_selector

ESTADOS_PLAN = ["todos", "Abierto", "En progreso", "Aprobado", "Rechazado", "Completado", "Cerrado"]


# -------------------------------------------------------
# Helpers generales
# -------------------------------------------------------
def _df_por_escuela(counts: dict) -> pd.DataFrame:
    """DataFrame de planesPorEscuela listo para las gráficas."""
    filas = counts.get("planesPorEscuela") or []
    df = pd.DataFrame(
        filas,
        columns=["schoolName", "totalPlanes", "docentes", "planesCompletados", "calidad"],
    )
    return df.rename(
        columns={
            "schoolName": "Facultad",
            "totalPlanes": "Planes",
            "docentes": "Docentes",
            "planesCompletados": "Completados",
            "calidad": "Calidad",
        }
    )


def _nombre_docente(plan: dict) -> str:
    docente = plan.get("docente") or {}
    return f"{docente.get('nombre', '')} {docente.get('apellido', '')}".strip() or "—"


def _tabla_planes(lista: list) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Título": p.get("titulo"),
                "Docente": _nombre_docente(p),
                "Facultad": ((p.get("docente") or {}).get("school") or {}).get("nombre"),
                "Estado": p.get("estado"),
                "Creado": (p.get("createdAt") or "")[:10],
            }
            for p in lista
        ]
    )


# -------------------------------------------------------
# Sección: Dashboard
# -------------------------------------------------------
@require_user_role(DIRECTOR)
def director_dashboard(session):
    st.title("Panel del Director")

    def _cargar():
        return run(
            gather(
                dashboard.director_counts(session.token),
                dashboard.estadisticas(session.token),
                dashboard.alertas(session.token),
            )
        )

    refrescar(st.session_state, "director_dashboard", _cargar, toast_error, "Error al cargar estadísticas")
    counts, resumen, avisos = st.session_state.get("director_dashboard") or ({}, {}, [])

    c1, c2, c3 = st.columns(3)
    c1.metric("Facultades", counts.get("schools", 0))
    c2.metric("Docentes", counts.get("docentes", 0))
    c3.metric("Planes", counts.get("planes", 0))

    planes_resumen = resumen.get("planes") or {}
    incidencias_resumen = resumen.get("incidencias") or {}
    if planes_resumen or incidencias_resumen:
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Planes activos", planes_resumen.get("activos", 0))
        c2.metric("Pendientes", planes_resumen.get("pendientes", 0))
        c3.metric("Rechazados", planes_resumen.get("rechazados", 0))
        c4.metric("Incidencias pendientes", incidencias_resumen.get("pendientes", 0))

    # alertas de prioridad alta primero
    orden = {"alta": 0, "media": 1, "baja": 2}
    for alerta in sorted(avisos, key=lambda a: orden.get(a.get("prioridad"), 3)):
        texto = f"**{alerta.get('mensaje', '')}** ({alerta.get('cantidad', 0)}) — {alerta.get('detalle', '')}"
        if alerta.get("prioridad") == "alta":
            st.error(texto)
        elif alerta.get("prioridad") == "media":
            st.warning(texto)
        else:
            st.info(texto)

    df = _df_por_escuela(counts)
    if df.empty:
        st.info("Aún no hay planes registrados por facultad.")
        return

    st.markdown("### Planes por facultad")
    st.bar_chart(df, x="Facultad", y=["Planes", "Completados"])
    st.dataframe(df, hide_index=True, use_container_width=True)


# -------------------------------------------------------
# Sección: Asignar planes
# -------------------------------------------------------
@require_user_role(DIRECTOR)
def asignar_planes(session):
    st.title("Asignar planes de mejoramiento")

    refrescar(
        st.session_state,
        "director_docentes",
        lambda: run(usuarios.listar_docentes(session.token)),
        toast_error,
        "Error al cargar docentes",
    )
    docentes = st.session_state.get("director_docentes") or []

    if not docentes:
        st.info("No hay docentes registrados.")
        return

    opciones = {
        f"{d.get('nombre', '')} {d.get('apellido', '')} — {(d.get('school') or {}).get('nombre', 'Sin facultad')}": d
        for d in docentes
    }

    with st.form("form_asignar_plan"):
        etiqueta = st.selectbox("Docente", list(opciones.keys()))
        titulo = st.text_input("Título del plan")
        descripcion = st.text_area("Descripción")
        enviar = st.form_submit_button("Asignar plan", type="primary")

    if enviar:
        if not titulo.strip() or not descripcion.strip():
            st.warning("Título y descripción son obligatorios.")
            return

        docente = opciones[etiqueta]
        try:
            run(planes.crear(session.token, titulo.strip(), descripcion.strip(), docente["id"]))
            st.success("Plan asignado correctamente.")
        except HttpError as e:
            toast_error(f"No se pudo asignar el plan: {e.message}")


# -------------------------------------------------------
# Sección: Seguimiento
# -------------------------------------------------------
def _acciones_seguimiento(session, lista: list):
    st.markdown("### Gestionar plan")

    opciones = {f"{p.get('titulo')} ({_nombre_docente(p)})": p for p in lista}
    etiqueta = st.selectbox("Plan", list(opciones.keys()), key="seg_plan")
    plan = opciones.get(etiqueta)
    if not plan:
        return

    c1, c2 = st.columns(2)
    operacion = None
    if c1.button("Aprobar", key="seg_aprobar"):
        operacion = ("aprobado", planes.aprobar)
    if c2.button("Cerrar", key="seg_cerrar"):
        operacion = ("cerrado", planes.cerrar)

    if operacion:
        texto, funcion = operacion
        try:
            run(funcion(session.token, plan["id"]))
            st.success(f"Plan {texto}.")
            st.rerun()
        except HttpError as e:
            toast_error(f"Error al actualizar el plan: {e.message}")


def _rechazados(session):
    """Planes devueltos por el decano que el director puede reenviar."""
    refrescar(
        st.session_state,
        "director_rechazados",
        lambda: run(planes.rechazados(session.token)),
        toast_error,
        "Error al cargar planes rechazados",
    )
    lista = st.session_state.get("director_rechazados") or []

    st.markdown("### Rechazados por el decano")
    if not lista:
        st.caption("No hay planes rechazados.")
        return

    for plan in lista:
        c1, c2 = st.columns([3, 1])
        c1.write(f"**{plan.get('titulo')}** — {_nombre_docente(plan)}")
        if plan.get("motivo"):
            c1.caption(f"Motivo: {plan['motivo']}")
        if c2.button("Reenviar al decano", key=f"seg_reenviar_{plan['id']}"):
            try:
                run(planes.reenviar_decano(session.token, plan["id"]))
                st.success("Plan reenviado al decano.")
                st.rerun()
            except HttpError as e:
                toast_error(f"No se pudo reenviar el plan: {e.message}")


@require_user_role(DIRECTOR)
def seguimiento(session):
    st.title("Seguimiento de planes")

    refrescar(
        st.session_state,
        "director_planes",
        lambda: run(planes.obtener_todos(session.token)),
        toast_error,
        "Error al cargar planes",
    )
    todos = st.session_state.get("director_planes") or []

    facultades = sorted(
        {((p.get("docente") or {}).get("school") or {}).get("nombre") for p in todos} - {None}
    )

    c1, c2, c3 = st.columns([2, 1, 1])
    busqueda = c1.text_input("Buscar por título o docente", key="seg_busqueda")
    facultad = c2.selectbox("Facultad", ["todas"] + facultades, key="seg_facultad")
    estado = c3.selectbox("Estado", ESTADOS_PLAN, key="seg_estado")

    filtrados = filter_records(
        todos,
        search=busqueda,
        search_fields=("titulo", "docente.nombre", "docente.apellido"),
        equals={"estado": estado, "docente.school.nombre": facultad},
    )

    aprobados = sum(1 for p in todos if p.get("estado") in ("Aprobado", "Completado", "Cerrado"))
    pendientes = sum(1 for p in todos if p.get("estado") == "Abierto")

    m1, m2, m3 = st.columns(3)
    m1.metric("Total", len(todos))
    m2.metric("Aprobados", aprobados)
    m3.metric("Pendientes", pendientes)

    if filtrados:
        st.dataframe(_tabla_planes(filtrados), hide_index=True, use_container_width=True)
        _acciones_seguimiento(session, filtrados)
    else:
        st.info("No hay planes que coincidan con los filtros.")

    st.markdown("---")
    _rechazados(session)


# -------------------------------------------------------
# Sección: Métricas
# -------------------------------------------------------
@require_user_role(DIRECTOR)
def metricas(session):
    st.title("Métricas por facultad")

    def _cargar():
        return run(gather(dashboard.director_counts(session.token), dashboard.departamentos(session.token)))

    refrescar(st.session_state, "director_metricas", _cargar, toast_error, "Error al cargar métricas")
    counts, lista_departamentos = st.session_state.get("director_metricas") or ({}, [])

    df = _df_por_escuela(counts)
    if df.empty:
        st.info("No hay métricas disponibles.")
    else:
        df["Cumplimiento (%)"] = (
            (df["Completados"] / df["Planes"].where(df["Planes"] > 0)) * 100
        ).fillna(0).round(1)

        st.markdown("### Cumplimiento por facultad")
        st.bar_chart(df, x="Facultad", y="Cumplimiento (%)")

        st.markdown("### Calidad por facultad")
        st.bar_chart(df, x="Facultad", y="Calidad")

        st.dataframe(df, hide_index=True, use_container_width=True)

    if lista_departamentos:
        st.markdown("### Planes por departamento")
        deps = pd.DataFrame(
            lista_departamentos,
            columns=["nombre", "totalDocentes", "totalPlanes", "planesActivos", "planesPendientes", "planesCompletados"],
        ).rename(
            columns={
                "nombre": "Departamento",
                "totalDocentes": "Docentes",
                "totalPlanes": "Planes",
                "planesActivos": "Activos",
                "planesPendientes": "Pendientes",
                "planesCompletados": "Completados",
            }
        )
        st.bar_chart(deps, x="Departamento", y=["Activos", "Pendientes", "Completados"])
        st.dataframe(deps, hide_index=True, use_container_width=True)


# -------------------------------------------------------
# Sección: Estrategia (incidencias)
# -------------------------------------------------------
@require_user_role(DIRECTOR)
def estrategia(session):
    st.title("Estrategia e incidencias")

    def _cargar():
        return run(gather(incidencias.listar(session.token), usuarios.listar_docentes(session.token)))

    refrescar(st.session_state, "director_estrategia", _cargar, toast_error, "Error al cargar incidencias")
    lista, docentes = st.session_state.get("director_estrategia") or ([], [])

    activas = sum(1 for i in lista if "pendiente" in (i.get("estado") or "").lower())
    completadas = sum(
        1 for i in lista
        if any(e in (i.get("estado") or "").lower() for e in ("revisado", "archivado"))
    )
    c1, c2, c3 = st.columns(3)
    c1.metric("Incidencias", len(lista))
    c2.metric("Activas", activas)
    c3.metric("Atendidas", completadas)

    busqueda = st.text_input("Buscar incidencia", key="est_busqueda")
    filtradas = filter_records(
        lista, search=busqueda, search_fields=("descripcion", "docente.nombre", "docente.apellido")
    )
    if filtradas:
        st.dataframe(
            pd.DataFrame(
                [
                    {
                        "Descripción": i.get("descripcion"),
                        "Docente": _nombre_docente(i),
                        "Estado": i.get("estado"),
                        "Fecha": (i.get("createdAt") or "")[:10],
                    }
                    for i in filtradas
                ]
            ),
            hide_index=True,
            use_container_width=True,
        )

        opciones = opciones_selector(filtradas, lambda i: f"{(i.get('descripcion') or '')[:60]} ({i.get('estado')})")
        etiqueta = st.selectbox("Incidencia", list(opciones.keys()), key="est_incidencia")
        nuevo_estado = st.selectbox("Nuevo estado", incidencias.ESTADOS, key="est_estado")
        if st.button("Actualizar estado"):
            try:
                run(incidencias.cambiar_estado(session.token, opciones[etiqueta]["id"], nuevo_estado))
                st.success("Estado actualizado.")
                st.rerun()
            except HttpError as e:
                toast_error(f"No se pudo actualizar la incidencia: {e.message}")
    else:
        st.info("No hay incidencias registradas.")

    st.markdown("---")
    st.markdown("### Registrar incidencia")
    if not docentes:
        st.info("No hay docentes para asociar la incidencia.")
        return

    mapa = {f"{d.get('nombre', '')} {d.get('apellido', '')}": d["id"] for d in docentes}
    with st.form("form_incidencia"):
        docente = st.selectbox("Docente", list(mapa.keys()))
        descripcion = st.text_area("Descripción")
        enviar = st.form_submit_button("Registrar")

    if enviar:
        if not descripcion.strip():
            st.warning("La descripción es obligatoria.")
            return
        try:
            run(incidencias.crear(session.token, descripcion.strip(), mapa[docente]))
            st.success("Incidencia registrada.")
        except HttpError as e:
            toast_error(f"No se pudo registrar la incidencia: {e.message}")
