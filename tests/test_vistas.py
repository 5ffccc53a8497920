"""
Unit Tests for the Streamlit views
Tests for: audit panel filters and failures, admin reports, router, user list normalization
"""
import datetime as dt
import json

import pytest
from streamlit.testing.v1 import AppTest

from sgpm.admin.panel import normalizar_usuarios
from sgpm.config.conexion import HttpError
from sgpm.servicios import auditoria, planes, reportes
from sgpm.utils.listas import FilterState, filter_records

TIMEOUT = 30


def _perfil(role):
    return json.dumps(
        {
            "id": "u-0",
            "email": "admin@usantoto.edu.co",
            "nombre": "Marta",
            "apellido": "Gómez",
            "facultad": "Ingeniería",
            "role": role,
        }
    )


def _con_sesion(at, role):
    at.session_state["token"] = "abc"
    at.session_state["user"] = _perfil(role)
    return at


def _script_auditoria():
    from sgpm.admin.panel import auditoria_panel

    auditoria_panel()


def _script_reportes():
    from sgpm.admin.panel import reportes_admin

    reportes_admin()


@pytest.fixture
def backend_auditoria(monkeypatch, audit_logs):
    """Servicios de auditoría simulados; control["error"] hace fallar los logs."""
    control = {"error": False, "params": []}

    async def obtener_logs(token, params=None, client=None):
        control["params"].append(params)
        if control["error"]:
            raise HttpError(500, "Base de datos no disponible")
        return {"logs": audit_logs, "total": len(audit_logs), "limit": 20, "offset": 0}

    async def obtener_estadisticas(token, fecha_inicio=None, fecha_fin=None, client=None):
        return {"total": 3, "porEntidad": [{"entidad": "Plan"}, {"entidad": "Usuario"}], "porAccion": []}

    monkeypatch.setattr(auditoria, "obtener_logs", obtener_logs)
    monkeypatch.setattr(auditoria, "obtener_estadisticas", obtener_estadisticas)
    return control


class TestAuditoriaPanel:
    """Test the audit screen"""

    def test_lists_logs(self, backend_auditoria):
        at = _con_sesion(AppTest.from_function(_script_auditoria, default_timeout=TIMEOUT), "Administrador")
        at.run()

        assert not at.exception
        assert len(at.dataframe[0].value) == 3

    def test_server_error_keeps_table_and_notifies(self, backend_auditoria):
        """Test a 500 keeps the previous logs on screen and shows a toast"""
        at = _con_sesion(AppTest.from_function(_script_auditoria, default_timeout=TIMEOUT), "Administrador")
        at.run()

        backend_auditoria["error"] = True
        at.run()

        assert not at.exception
        assert len(at.dataframe[0].value) == 3
        assert "Error al cargar datos de auditoría: Base de datos no disponible" in [t.value for t in at.toast]

    def test_clear_filters_resets_every_filter(self, backend_auditoria):
        """Test the clear button resets search, selectors and both dates"""
        at = _con_sesion(AppTest.from_function(_script_auditoria, default_timeout=TIMEOUT), "Administrador")
        at.run()

        at.text_input(key="aud_busqueda").input("plan")
        at.selectbox(key="aud_accion").select("CREATE")
        at.date_input(key="aud_desde").set_value(dt.date(2024, 5, 1))
        at.date_input(key="aud_hasta").set_value(dt.date(2024, 5, 31))
        at.run()

        filtros = at.session_state["admin_auditoria_filtros"]
        assert filtros.fecha_inicio == "2024-05-01"
        assert filtros.busqueda == "plan"

        at.button(key="aud_limpiar").click().run()

        assert not at.exception
        assert at.session_state["admin_auditoria_filtros"] == FilterState()
        assert at.date_input(key="aud_desde").value is None
        assert at.date_input(key="aud_hasta").value is None
        assert backend_auditoria["params"][-1] == {"limit": 20, "offset": 0}

    def test_same_description_logs_stay_selectable(self, backend_auditoria, audit_logs):
        """Test logs with identical timestamp and text remain separate options"""
        audit_logs.append({**audit_logs[0], "id": "l-4"})
        at = _con_sesion(AppTest.from_function(_script_auditoria, default_timeout=TIMEOUT), "Administrador")
        at.run()

        assert len(at.selectbox(key="aud_detalle").options) == 4

    def test_other_role_is_rejected(self, backend_auditoria):
        at = _con_sesion(AppTest.from_function(_script_auditoria, default_timeout=TIMEOUT), "Docente")
        at.run()

        assert at.error[0].value == "No tiene permiso para ver esta sección."
        assert backend_auditoria["params"] == []


class TestReportesAdmin:
    """Test the admin reports screen"""

    def test_failed_reload_keeps_previous_reports(self, monkeypatch):
        control = {"error": False}

        async def generar_reporte(token, tipo, client=None):
            if control["error"]:
                raise HttpError(500, "fallo")
            return {
                "id": f"{tipo}-1",
                "titulo": f"Reporte {tipo}",
                "tipo": tipo,
                "fechaGeneracion": "2024-05-01",
                "estado": "generado",
                "descripcion": "",
                "registros": 0,
                "datos": {} if tipo == "general" else [],
            }

        monkeypatch.setattr(reportes, "generar_reporte", generar_reporte)

        at = _con_sesion(AppTest.from_function(_script_reportes, default_timeout=TIMEOUT), "Administrador")
        at.run()
        assert len(at.expander) == 4

        control["error"] = True
        at.run()

        assert not at.exception
        assert len(at.expander) == 4
        assert "Error al generar reportes: fallo" in [t.value for t in at.toast]


class TestRouter:
    """Test the app entry point"""

    def test_no_session_shows_login(self):
        at = AppTest.from_file("../app.py", default_timeout=TIMEOUT)
        at.run()

        assert not at.exception
        assert at.title[0].value == "SGPM — Iniciar sesión"

    def test_unknown_role_has_no_menu(self):
        at = _con_sesion(AppTest.from_file("../app.py", default_timeout=TIMEOUT), "Rector")
        at.run()

        assert not at.exception
        assert len(at.radio) == 0
        assert at.warning[0].value == "Rol sin vistas asignadas: Rector"

    def test_known_role_gets_its_menu(self, monkeypatch):
        async def mis_planes(token, client=None):
            return []

        monkeypatch.setattr(planes, "mis_planes", mis_planes)

        at = _con_sesion(AppTest.from_file("../app.py", default_timeout=TIMEOUT), "Docente")
        at.run()

        assert not at.exception
        assert list(at.radio(key="nav_selector").options) == ["Dashboard", "Mis Planes", "Evidencias"]
        assert at.title[0].value == "Hola, Marta"


class TestNormalizarUsuarios:
    def test_missing_flag_counts_as_active(self):
        lista = normalizar_usuarios([{"id": "u-1"}, {"id": "u-2", "activo": False}, {"id": "u-3", "activo": None}])

        assert [u["activo"] for u in lista] == [True, False, True]

    def test_active_filter_keeps_users_without_flag(self):
        """Test the 'activo' filter matches what the table shows"""
        lista = normalizar_usuarios([{"id": "u-1"}, {"id": "u-2", "activo": False}])

        assert [u["id"] for u in filter_records(lista, equals={"activo": True})] == ["u-1"]
        assert [u["id"] for u in filter_records(lista, equals={"activo": False})] == ["u-2"]
