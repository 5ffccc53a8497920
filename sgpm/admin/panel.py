# sgpm/admin/panel.py

import secrets

import pandas as pd
import streamlit as st

from sgpm.auth.navegacion import ADMINISTRADOR
from sgpm.auth.rbac import require_user_role
from sgpm.auth.validaciones import separar_nombre, validar_usuario, validate_email
from sgpm.config.conexion import HttpError, gather, run
from sgpm.servicios import auditoria, dashboard, facultades, reportes, usuarios
from sgpm.utils.estado import refrescar, toast_error
from sgpm.utils.listas import (
    FilterState,
    csv_filename,
    filter_records,
    get_field,
    opciones_selector,
    paginate,
    to_csv,
    total_pages,
)

ROLES_USUARIO = {
    "docente": "Docente",
    "decano": "Decano",
    "director_academico": "Director Académico",
    "admin": "Administrador",
}

ACCIONES_AUDITORIA = ["CREATE", "UPDATE", "DELETE", "ASIGNAR", "APROBAR", "RECHAZAR", "LOGIN", "DEACTIVATE"]

USUARIOS_POR_PAGINA = 15


def normalizar_usuarios(lista: list) -> list:
    """Un usuario sin campo 'activo' cuenta como activo."""
    return [{**u, "activo": u.get("activo") is not False} for u in lista]


def _fecha_hora(valor) -> str:
    """'2024-05-01T10:20:30.000Z' -> '2024-05-01 10:20:30'."""
    texto = str(valor or "")
    return texto[:19].replace("T", " ")


COLUMNAS_AUDITORIA = [
    ("Fecha", lambda log: _fecha_hora(log.get("createdAt"))),
    ("Usuario", lambda log: f"{get_field(log, 'usuario.nombre') or ''} {get_field(log, 'usuario.apellido') or ''}".strip()),
    ("Entidad", "entidad"),
    ("Acción", "accion"),
    ("Descripción", "descripcion"),
    ("IP", lambda log: log.get("ipAddress") or "N/A"),
]

COLUMNAS_REPORTE = {
    "facultad": [("Facultad", "nombre"), ("Decano", "decano"), ("Correo decano", "emailDecano"), ("Docentes", "cantidadDocentes")],
    "docente": [("Nombre", "nombre"), ("Apellido", "apellido"), ("Correo", "email"), ("Rol", "role"), ("Facultad", "school.nombre")],
    "planes": [("Título", "titulo"), ("Estado", "estado"), ("Docente", "docente.nombre"), ("Apellido", "docente.apellido"), ("Fecha", "fechaCreacion")],
}


# ==========================
#  DASHBOARD
# ==========================

@require_user_role(ADMINISTRADOR)
def admin_dashboard(session):
    st.title("Panel de Administración — SGPM")

    def _cargar():
        return run(
            gather(
                dashboard.admin_stats(session.token),
                auditoria.actividad_reciente(session.token, limit=10),
            )
        )

    refrescar(st.session_state, "admin_dashboard", _cargar, toast_error, "Error al cargar el panel")
    stats, actividad = st.session_state.get("admin_dashboard") or ({}, [])

    c1, c2, c3, c4, c5 = st.columns(5)
    c1.metric("Docentes", stats.get("totalDocentes", 0))
    c2.metric("Facultades", stats.get("totalFacultades", 0))
    c3.metric("Planes activos", stats.get("planesActivos", 0))
    c4.metric("Pendientes", stats.get("planesPendientes", 0))
    c5.metric("Completados", stats.get("planesCompletados", 0))

    st.markdown("### Actividad reciente")
    if not actividad:
        st.info("No hay actividad registrada.")
        return

    for item in actividad:
        st.write(
            f"**{item.get('usuario', '')}** — {item.get('descripcion', '')} "
            f"· {item.get('accion', '')} {item.get('entidad', '')} · {_fecha_hora(item.get('fecha'))}"
        )


# ==========================
#  USUARIOS
# ==========================

def _crear_usuario(session, lista_facultades: list):
    st.write("### Crear usuario")

    mapa_facultades = {f.get("nombre"): f.get("id") for f in lista_facultades}

    with st.form("form_crear_usuario"):
        nombre = st.text_input("Nombre completo")
        email = st.text_input("Correo institucional")
        rol = st.selectbox("Rol", list(ROLES_USUARIO.keys()), format_func=ROLES_USUARIO.get)
        facultad = st.selectbox("Facultad", ["—"] + list(mapa_facultades.keys()))
        enviar = st.form_submit_button("Crear usuario")

    if not enviar:
        return

    school_id = mapa_facultades.get(facultad)
    errores = validar_usuario(nombre, email, rol, school_id)
    if errores:
        for mensaje in errores.values():
            st.warning(mensaje)
        return

    nombre_pila, apellido = separar_nombre(nombre)
    try:
        run(
            usuarios.crear_usuario(
                session.token,
                nombre_pila,
                apellido,
                email.strip().lower(),
                # El backend envía esta contraseña temporal por correo
                secrets.token_urlsafe(9),
                school_id,
                rol,
            )
        )
        st.success("Usuario creado exitosamente. Se envió un correo con su contraseña temporal.")
        st.rerun()
    except HttpError as e:
        toast_error(f"Error al crear usuario: {e.message}")


def _editar_usuario(session, lista: list, lista_facultades: list):
    st.write("### Editar usuario")

    opciones = {f"{u.get('nombre', '')} {u.get('apellido', '')} ({u.get('email', '')})": u for u in lista}
    etiqueta = st.selectbox("Usuario", list(opciones.keys()), key="adm_usuario_editar")
    usuario = opciones.get(etiqueta)
    if not usuario:
        return

    mapa_facultades = {f.get("nombre"): f.get("id") for f in lista_facultades}
    nombres_facultad = ["—"] + list(mapa_facultades.keys())
    facultad_actual = (usuario.get("school") or {}).get("nombre")
    roles = list(ROLES_USUARIO.keys())

    with st.form("form_editar_usuario"):
        nombre = st.text_input(
            "Nombre completo",
            value=f"{usuario.get('nombre', '')} {usuario.get('apellido', '')}".strip(),
            key=f"adm_edit_nombre_{usuario['id']}",
        )
        email = st.text_input(
            "Correo institucional", value=usuario.get("email") or "", key=f"adm_edit_email_{usuario['id']}"
        )
        rol = st.selectbox(
            "Rol",
            roles,
            index=roles.index(usuario.get("role")) if usuario.get("role") in roles else 0,
            format_func=ROLES_USUARIO.get,
            key=f"adm_edit_rol_{usuario['id']}",
        )
        facultad = st.selectbox(
            "Facultad",
            nombres_facultad,
            index=nombres_facultad.index(facultad_actual) if facultad_actual in nombres_facultad else 0,
            key=f"adm_edit_facultad_{usuario['id']}",
        )
        guardar = st.form_submit_button("Guardar cambios")

    if not guardar:
        return

    school_id = mapa_facultades.get(facultad)
    errores = validar_usuario(nombre, email, rol, school_id)
    if errores:
        for mensaje in errores.values():
            st.warning(mensaje)
        return

    nombre_pila, apellido = separar_nombre(nombre)
    cambios = {
        "nombre": nombre_pila,
        "apellido": apellido,
        "email": email.strip().lower(),
        "role": rol,
        "schoolId": school_id,
    }
    try:
        run(usuarios.actualizar_usuario(session.token, usuario["id"], cambios))
        st.success("Usuario actualizado.")
        st.rerun()
    except HttpError as e:
        toast_error(f"Error al actualizar usuario: {e.message}")


def _cambiar_estado_usuario(session, lista: list):
    st.write("### Activar / desactivar usuario")

    opciones = {f"{u.get('nombre', '')} {u.get('apellido', '')} ({u.get('email', '')})": u for u in lista}
    etiqueta = st.selectbox("Usuario", list(opciones.keys()), key="adm_usuario_estado")
    usuario = opciones.get(etiqueta)
    if not usuario:
        return

    activo = usuario["activo"]
    st.caption("Estado actual: " + ("activo" if activo else "inactivo"))

    confirmar = st.checkbox("Confirmo el cambio de estado de este usuario.", key="adm_chk_estado")
    if st.button("Desactivar" if activo else "Activar"):
        if not confirmar:
            st.warning("Debes marcar la casilla de confirmación.")
            return
        operacion = usuarios.desactivar_usuario if activo else usuarios.activar_usuario
        try:
            run(operacion(session.token, usuario["id"]))
            st.success("Usuario actualizado.")
            st.rerun()
        except HttpError as e:
            toast_error(f"No se pudo actualizar el usuario: {e.message}")


@require_user_role(ADMINISTRADOR)
def gestion_usuarios(session):
    st.title("Gestión de usuarios")

    def _cargar():
        return run(
            gather(
                usuarios.listar_docentes(session.token, include_inactive=True),
                facultades.listar(session.token),
            )
        )

    refrescar(st.session_state, "admin_usuarios", _cargar, toast_error, "Error al cargar usuarios")
    lista, lista_facultades = st.session_state.get("admin_usuarios") or ([], [])
    lista = normalizar_usuarios(lista)

    c1, c2, c3 = st.columns([2, 1, 1])
    busqueda = c1.text_input("Buscar por nombre o correo", key="adm_busqueda")
    rol = c2.selectbox("Rol", ["todos"] + list(ROLES_USUARIO.keys()), key="adm_rol")
    estado = c3.selectbox("Estado", ["todos", "activo", "inactivo"], key="adm_estado")

    filtrados = filter_records(
        lista,
        search=busqueda,
        search_fields=("nombre", "apellido", "email"),
        equals={
            "role": rol,
            "activo": None if estado == "todos" else estado == "activo",
        },
    )

    paginas = total_pages(len(filtrados), USUARIOS_POR_PAGINA)
    pagina = 0
    if paginas > 1:
        pagina = st.number_input("Página", min_value=1, max_value=paginas, value=1, key="adm_pagina") - 1

    st.caption(f"{len(filtrados)} usuarios")
    visibles = paginate(filtrados, pagina, USUARIOS_POR_PAGINA)
    if visibles:
        st.dataframe(
            pd.DataFrame(
                [
                    {
                        "Nombre": f"{u.get('nombre', '')} {u.get('apellido', '')}",
                        "Correo": u.get("email"),
                        "Rol": ROLES_USUARIO.get(u.get("role"), u.get("role")),
                        "Facultad": (u.get("school") or {}).get("nombre"),
                        "Activo": u["activo"],
                    }
                    for u in visibles
                ]
            ),
            hide_index=True,
            use_container_width=True,
        )
    else:
        st.info("No hay usuarios que coincidan con los filtros.")

    st.write("---")
    _crear_usuario(session, lista_facultades)

    if lista:
        st.write("---")
        _editar_usuario(session, lista, lista_facultades)
        st.write("---")
        _cambiar_estado_usuario(session, lista)


# ==========================
#  FACULTADES
# ==========================

def _validar_facultad(nombre: str, email_decano: str) -> str | None:
    if not nombre.strip():
        return "Ingrese un nombre válido."
    if email_decano.strip():
        return validate_email(email_decano)
    return None


@require_user_role(ADMINISTRADOR)
def gestion_facultades(session):
    st.title("Facultades")

    refrescar(
        st.session_state,
        "admin_facultades",
        lambda: run(facultades.listar(session.token)),
        toast_error,
        "Error al cargar facultades",
    )
    lista = st.session_state.get("admin_facultades") or []

    st.write("### Lista de facultades")
    if lista:
        st.dataframe(
            pd.DataFrame(
                [
                    {
                        "Nombre": f.get("nombre"),
                        "Decano": f.get("decano") or "No asignado",
                        "Correo decano": f.get("emailDecano") or "No asignado",
                        "Docentes": f.get("cantidadDocentes") or 0,
                    }
                    for f in lista
                ]
            ),
            hide_index=True,
            use_container_width=True,
        )
    else:
        st.info("No hay facultades registradas.")

    # ------- Crear facultad -------
    st.write("---")
    st.write("### Crear nueva facultad")

    with st.form("form_crear_facultad"):
        nombre = st.text_input("Nombre de la facultad")
        decano = st.text_input("Decano")
        email_decano = st.text_input("Correo del decano")
        enviar = st.form_submit_button("Crear facultad")

    if enviar:
        error = _validar_facultad(nombre, email_decano)
        if error:
            st.warning(error)
        else:
            try:
                run(facultades.crear(session.token, nombre.strip(), decano.strip(), email_decano.strip()))
                st.success("Facultad creada correctamente.")
                st.rerun()
            except HttpError as e:
                toast_error(f"No se pudo crear la facultad: {e.message}")

    if not lista:
        return

    # ------- Editar / eliminar facultad -------
    st.write("---")
    st.write("### Editar o eliminar facultad")

    opciones = {f"{f.get('nombre')}": f for f in lista}
    etiqueta = st.selectbox("Seleccione la facultad", list(opciones.keys()), key="adm_facultad")
    facultad = opciones[etiqueta]

    with st.form("form_editar_facultad"):
        nuevo_nombre = st.text_input("Nombre", value=facultad.get("nombre") or "", key=f"adm_fac_nombre_{facultad['id']}")
        nuevo_decano = st.text_input("Decano", value=facultad.get("decano") or "", key=f"adm_fac_decano_{facultad['id']}")
        nuevo_email = st.text_input("Correo del decano", value=facultad.get("emailDecano") or "", key=f"adm_fac_email_{facultad['id']}")
        guardar = st.form_submit_button("Guardar cambios")

    if guardar:
        error = _validar_facultad(nuevo_nombre, nuevo_email)
        if error:
            st.warning(error)
        else:
            try:
                run(
                    facultades.actualizar(
                        session.token, facultad["id"], nuevo_nombre.strip(), nuevo_decano.strip(), nuevo_email.strip()
                    )
                )
                st.success("Facultad actualizada.")
                st.rerun()
            except HttpError as e:
                toast_error(f"No se pudo actualizar la facultad: {e.message}")

    confirmar = st.checkbox("Confirmo que deseo eliminar esta facultad (no se puede deshacer).")
    if st.button("Eliminar facultad"):
        if not confirmar:
            st.warning("Debes marcar la casilla de confirmación.")
        else:
            try:
                run(facultades.eliminar(session.token, facultad["id"]))
                st.success("Facultad eliminada correctamente.")
                st.rerun()
            except HttpError as e:
                toast_error(f"No se pudo eliminar la facultad: {e.message}")


# ==========================
#  REPORTES
# ==========================

@require_user_role(ADMINISTRADOR)
def reportes_admin(session):
    st.title("Reportes del sistema")

    refrescar(
        st.session_state,
        "admin_reportes",
        lambda: run(reportes.obtener_reportes(session.token)),
        toast_error,
        "Error al generar reportes",
    )
    lista = st.session_state.get("admin_reportes") or []

    busqueda = st.text_input("Buscar reporte", key="adm_rep_busqueda")
    filtrados = filter_records(lista, search=busqueda, search_fields=("titulo", "descripcion"))

    if not filtrados:
        st.info("No hay reportes disponibles.")
        return

    for reporte in filtrados:
        with st.expander(f"{reporte['titulo']} — {reporte['registros']} registros"):
            st.caption(f"{reporte['descripcion']} · Generado el {reporte['fechaGeneracion']}")

            tipo = reporte["tipo"]
            if tipo == "general":
                st.json(reporte["datos"])
                continue

            columnas = COLUMNAS_REPORTE[tipo]
            st.dataframe(
                pd.DataFrame(
                    [{encabezado: get_field(fila, campo) for encabezado, campo in columnas} for fila in reporte["datos"]]
                ),
                hide_index=True,
                use_container_width=True,
            )
            st.download_button(
                "Exportar CSV",
                data=to_csv(reporte["datos"], columnas),
                file_name=csv_filename(f"reporte_{tipo}"),
                mime="text/csv",
                key=f"adm_csv_{tipo}",
            )


# ==========================
#  AUDITORÍA
# ==========================

# clave del widget -> valor vacío
_WIDGETS_AUDITORIA = {
    "aud_busqueda": "",
    "aud_entidad": "todas",
    "aud_accion": "todas",
    "aud_desde": None,
    "aud_hasta": None,
}


def _limpiar_filtros(filtros: FilterState):
    filtros.limpiar()
    for clave, vacio in _WIDGETS_AUDITORIA.items():
        st.session_state[clave] = vacio


def _filtros_auditoria(filtros: FilterState, entidades: list):
    st.write("### Filtros")
    antes = (filtros.busqueda, filtros.entidad, filtros.accion, filtros.fecha_inicio, filtros.fecha_fin)

    c1, c2, c3 = st.columns(3)
    filtros.busqueda = c1.text_input("Búsqueda", key="aud_busqueda")
    opciones_entidad = ["todas"] + entidades
    if st.session_state.get("aud_entidad") not in opciones_entidad:
        st.session_state["aud_entidad"] = "todas"
    filtros.entidad = c2.selectbox("Entidad", opciones_entidad, key="aud_entidad")
    filtros.accion = c3.selectbox("Acción", ["todas"] + ACCIONES_AUDITORIA, key="aud_accion")

    c4, c5, c6 = st.columns(3)
    inicio = c4.date_input("Desde", value=None, key="aud_desde")
    fin = c5.date_input("Hasta", value=None, key="aud_hasta")
    filtros.fecha_inicio = inicio.isoformat() if inicio else ""
    filtros.fecha_fin = fin.isoformat() if fin else ""

    # Cualquier cambio de filtro vuelve a la primera página
    if (filtros.busqueda, filtros.entidad, filtros.accion, filtros.fecha_inicio, filtros.fecha_fin) != antes:
        filtros.pagina = 0

    c6.button("Limpiar filtros", key="aud_limpiar", on_click=_limpiar_filtros, args=(filtros,))


@require_user_role(ADMINISTRADOR)
def auditoria_panel(session):
    st.title("Auditoría del sistema")
    st.caption("Registro completo de todas las actividades del sistema")

    if "admin_auditoria_filtros" not in st.session_state:
        st.session_state["admin_auditoria_filtros"] = FilterState()
    filtros: FilterState = st.session_state["admin_auditoria_filtros"]

    stats_previas = (st.session_state.get("admin_auditoria") or ({}, {}))[1]
    entidades = [e.get("entidad") for e in stats_previas.get("porEntidad") or [] if e.get("entidad")]
    _filtros_auditoria(filtros, entidades)

    def _cargar():
        return run(
            gather(
                auditoria.obtener_logs(session.token, filtros.to_params()),
                auditoria.obtener_estadisticas(session.token, filtros.fecha_inicio or None, filtros.fecha_fin or None),
            )
        )

    refrescar(st.session_state, "admin_auditoria", _cargar, toast_error, "Error al cargar datos de auditoría")
    resultado, stats = st.session_state.get("admin_auditoria") or ({"logs": [], "total": 0}, {})
    logs = resultado.get("logs") or []

    if stats:
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Total de registros", stats.get("total", 0))
        c2.metric("Entidades", len(stats.get("porEntidad") or []))
        c3.metric("Tipos de acción", len(stats.get("porAccion") or []))
        c4.metric("Usuarios activos", len(stats.get("usuariosMasActivos") or []))

    st.download_button(
        "Exportar CSV",
        data=to_csv(logs, COLUMNAS_AUDITORIA),
        file_name=csv_filename("auditoria"),
        mime="text/csv",
    )

    if not logs:
        st.info("No hay registros para los filtros seleccionados.")
        return

    st.dataframe(
        pd.DataFrame(
            [{encabezado: _valor(log, acceso) for encabezado, acceso in COLUMNAS_AUDITORIA} for log in logs]
        ),
        hide_index=True,
        use_container_width=True,
    )

    paginas = max(total_pages(resultado.get("total", 0), filtros.por_pagina), 1)
    c1, c2, c3 = st.columns([1, 2, 1])
    if c1.button("Anterior", disabled=filtros.pagina <= 0):
        filtros.pagina -= 1
        st.rerun()
    c2.caption(f"Página {filtros.pagina + 1} de {paginas}")
    if c3.button("Siguiente", disabled=filtros.pagina + 1 >= paginas):
        filtros.pagina += 1
        st.rerun()

    opciones = opciones_selector(
        logs, lambda log: f"{_fecha_hora(log.get('createdAt'))} · {(log.get('descripcion') or '')[:60]}"
    )
    etiqueta = st.selectbox("Ver detalle", list(opciones.keys()), key="aud_detalle")
    detalle = opciones[etiqueta]
    with st.expander("Detalle del registro"):
        st.write(f"**Entidad afectada:** {detalle.get('entidadAfectada') or 'N/A'}")
        st.write(f"**Agente:** {detalle.get('userAgent') or 'N/A'}")
        c1, c2 = st.columns(2)
        c1.write("Datos previos")
        c1.json(detalle.get("datosPrevios") or {})
        c2.write("Datos nuevos")
        c2.json(detalle.get("datosNuevos") or {})


def _valor(registro, acceso):
    return acceso(registro) if callable(acceso) else get_field(registro, acceso)
