"""
Unit Tests for screen state refresh
Tests for: successful loads, failed loads keep previous data and notify
"""
import httpx

from sgpm.config.conexion import HttpError, run
from sgpm.servicios import auditoria, reportes
from sgpm.utils.estado import refrescar

BASE_URL = "http://sgpm.test/api"


class TestRefrescar:
    def test_success_replaces_value(self):
        estado = {"datos": [1]}
        avisos = []

        ok = refrescar(estado, "datos", lambda: [1, 2], avisos.append)

        assert ok is True
        assert estado["datos"] == [1, 2]
        assert avisos == []

    def test_audit_server_error_keeps_previous_logs(self, audit_logs):
        """Test a 500 from the audit endpoint notifies and leaves the table as it was"""
        previos = {"logs": audit_logs, "total": 3, "limit": 20, "offset": 0}
        estado = {"auditoria": previos}
        avisos = []

        def handler(request):
            return httpx.Response(500, json={"error": "Base de datos no disponible"})

        async def _pedir():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL) as client:
                return await auditoria.obtener_logs("abc", {"limit": 20, "offset": 0}, client=client)

        ok = refrescar(estado, "auditoria", lambda: run(_pedir()), avisos.append, "Error al cargar logs")

        assert ok is False
        assert estado["auditoria"] is previos
        assert avisos == ["Error al cargar logs: Base de datos no disponible"]

    def test_first_failure_leaves_key_absent(self):
        estado = {}
        avisos = []

        def _falla():
            raise HttpError(0, "No se pudo conectar con el servidor")

        assert refrescar(estado, "planes", _falla, avisos.append) is False
        assert "planes" not in estado
        assert avisos == ["Error al cargar datos: No se pudo conectar con el servidor"]

    def test_reports_server_error_keeps_previous_reports(self):
        """Test a failed reports load notifies and leaves the previous reports"""
        previos = [{"id": "general-1", "titulo": "Reporte General del Sistema", "tipo": "general"}]
        estado = {"admin_reportes": previos}
        avisos = []

        def handler(request):
            return httpx.Response(500, json={"error": "Servicio no disponible"})

        async def _pedir():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL) as client:
                return await reportes.obtener_reportes("abc", client=client)

        ok = refrescar(estado, "admin_reportes", lambda: run(_pedir()), avisos.append, "Error al generar reportes")

        assert ok is False
        assert estado["admin_reportes"] is previos
        assert avisos == ["Error al generar reportes: Servicio no disponible"]
