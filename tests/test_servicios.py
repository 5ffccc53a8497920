"""
Unit Tests for the per-domain API services
Tests for: audit queries, report generation, plan review, evidence uploads, dashboard summaries
"""
import json

import httpx
import pytest

from sgpm.config.conexion import HttpError
from sgpm.servicios import auditoria, dashboard, evidencias, planes, reportes, usuarios

COUNTS = {
    "schools": 2,
    "docentes": 7,
    "planes": 10,
    "planesPorEscuela": [
        {"schoolName": "Ingeniería", "totalPlanes": 6, "docentes": 4, "planesCompletados": 3, "calidad": 80},
        {"schoolName": "Derecho", "totalPlanes": 4, "docentes": 3, "planesCompletados": 1, "calidad": 65},
    ],
}


class TestAuditoria:
    """Test audit log queries"""

    @pytest.mark.asyncio
    async def test_filters_are_sent_as_query(self, mock_client, audit_logs):
        vistos = {}

        def handler(request):
            vistos["path"] = request.url.path
            vistos["query"] = dict(request.url.params)
            return httpx.Response(200, json={"logs": audit_logs, "total": "3", "limit": 20, "offset": 0})

        params = {"entidad": "Plan", "accion": None, "fechaInicio": "2024-05-01", "limit": 20, "offset": 0}
        async with mock_client(handler) as client:
            resultado = await auditoria.obtener_logs("abc", params, client=client)

        assert vistos["path"] == "/api/auditoria/logs"
        assert vistos["query"] == {"entidad": "Plan", "fechaInicio": "2024-05-01", "limit": "20", "offset": "0"}
        assert resultado["total"] == 3
        assert len(resultado["logs"]) == 3

    @pytest.mark.asyncio
    async def test_recent_activity(self, mock_client):
        def handler(request):
            assert request.url.params["limit"] == "5"
            return httpx.Response(200, json={"actividades": [{"id": "a-1"}]})

        async with mock_client(handler) as client:
            assert await auditoria.actividad_reciente("abc", 5, client=client) == [{"id": "a-1"}]


class TestDashboard:
    def test_admin_summary(self):
        resumen = dashboard.resumen_admin(COUNTS)

        assert resumen == {
            "totalDocentes": 7,
            "planesActivos": 6,
            "planesPendientes": 6,
            "planesCompletados": 4,
            "totalFacultades": 2,
        }

    def test_admin_summary_empty(self):
        assert dashboard.resumen_admin({})["planesActivos"] == 0


def _backend(request):
    """Backend mínimo para los cuatro reportes."""
    rutas = {
        "/api/director/counts": COUNTS,
        "/api/schools": {"schools": [{"id": "s-1"}, {"id": "s-2"}]},
        "/api/docentes": {"docentes": [{"id": "u-1"}]},
        "/api/plans/all": {"planes": [{"id": "p-1"}, {"id": "p-2"}, {"id": "p-3"}]},
    }
    return httpx.Response(200, json=rutas[request.url.path])


class TestReportes:
    """Test real-time report generation"""

    @pytest.mark.asyncio
    async def test_all_reports(self, mock_client):
        async with mock_client(_backend) as client:
            lista = await reportes.obtener_reportes("abc", client=client)

        assert [r["tipo"] for r in lista] == list(reportes.TIPOS)
        registros = {r["tipo"]: r["registros"] for r in lista}
        assert registros == {"general": 9, "facultad": 2, "docente": 1, "planes": 3}
        assert all(r["estado"] == "generado" for r in lista)

    @pytest.mark.asyncio
    async def test_one_failure_is_raised(self, mock_client):
        """Test a failing report surfaces its HttpError instead of an empty list"""
        def handler(request):
            if request.url.path == "/api/schools":
                return httpx.Response(500, json={"error": "fallo"})
            return _backend(request)

        async with mock_client(handler) as client:
            with pytest.raises(HttpError) as exc:
                await reportes.obtener_reportes("abc", client=client)

        assert exc.value.status_code == 500
        assert exc.value.message == "fallo"

    @pytest.mark.asyncio
    async def test_invalid_type(self):
        with pytest.raises(ValueError):
            await reportes.generar_reporte("abc", "mensual")


class TestPlanes:
    @pytest.mark.asyncio
    async def test_dean_decision_body(self, mock_client):
        vistos = {}

        def handler(request):
            vistos["method"] = request.method
            vistos["path"] = request.url.path
            vistos["body"] = json.loads(request.content)
            return httpx.Response(200, json={"ok": True})

        async with mock_client(handler) as client:
            await planes.decidir_decano("abc", "p-7", False, "Faltan acciones", client=client)

        assert vistos["method"] == "POST"
        assert vistos["path"] == "/api/decano/planes/p-7/aprobar"
        assert vistos["body"] == {"aprobado": False, "comentarios": "Faltan acciones"}

    @pytest.mark.asyncio
    async def test_my_plans_unwrapped(self, mock_client):
        def handler(request):
            return httpx.Response(200, json={"planes": [{"id": "p-1"}]})

        async with mock_client(handler) as client:
            assert await planes.mis_planes("abc", client=client) == [{"id": "p-1"}]

    @pytest.mark.asyncio
    async def test_create_with_incident(self, mock_client):
        vistos = {}

        def handler(request):
            vistos["body"] = json.loads(request.content)
            return httpx.Response(201, json={"id": "p-9"})

        async with mock_client(handler) as client:
            await planes.crear("abc", "Plan", "Desc", "u-1", "i-3", client=client)

        assert vistos["body"] == {"titulo": "Plan", "descripcion": "Desc", "docenteId": "u-1", "incidenciaId": "i-3"}


class TestEvidencias:
    @pytest.mark.asyncio
    async def test_upload_is_multipart(self, mock_client):
        vistos = {}

        def handler(request):
            vistos["content_type"] = request.headers["Content-Type"]
            vistos["body"] = request.read()
            return httpx.Response(201, json={"evidencia": {"id": "e-1"}})

        async with mock_client(handler) as client:
            evidencia = await evidencias.subir("abc", "a-1", "acta.pdf", b"%PDF-1.4", "application/pdf", "Acta firmada", client=client)

        assert evidencia == {"id": "e-1"}
        assert vistos["content_type"].startswith("multipart/form-data")
        assert b'name="accionId"' in vistos["body"]
        assert b'filename="acta.pdf"' in vistos["body"]
        assert b"Acta firmada" in vistos["body"]


class TestUsuarios:
    @pytest.mark.asyncio
    async def test_inactive_flag_only_when_requested(self, mock_client):
        consultas = []

        def handler(request):
            consultas.append(dict(request.url.params))
            return httpx.Response(200, json={"docentes": []})

        async with mock_client(handler) as client:
            await usuarios.listar_docentes("abc", client=client)
            await usuarios.listar_docentes("abc", include_inactive=True, school_id="s-1", client=client)

        assert consultas == [{}, {"includeInactive": "true", "schoolId": "s-1"}]

    @pytest.mark.asyncio
    async def test_update_returns_user(self, mock_client):
        def handler(request):
            assert request.method == "PUT"
            assert request.url.path == "/api/auth/users/u-1"
            return httpx.Response(200, json={"message": "ok", "user": {"id": "u-1", "role": "decano"}})

        async with mock_client(handler) as client:
            usuario = await usuarios.actualizar_usuario("abc", "u-1", {"role": "decano"}, client=client)

        assert usuario == {"id": "u-1", "role": "decano"}


class TestAcciones:
    @pytest.mark.asyncio
    async def test_state_change_is_patch(self, mock_client):
        vistos = {}

        def handler(request):
            vistos["method"] = request.method
            vistos["path"] = request.url.path
            vistos["body"] = json.loads(request.content)
            return httpx.Response(200, json={})

        async with mock_client(handler) as client:
            await planes.cambiar_estado_accion("abc", "a-4", "completada", client=client)

        assert vistos == {"method": "PATCH", "path": "/api/acciones/a-4/estado", "body": {"estado": "completada"}}

    @pytest.mark.asyncio
    async def test_get_plan_unwraps(self, mock_client):
        def handler(request):
            return httpx.Response(200, json={"plan": {"id": "p-1", "titulo": "Plan"}})

        async with mock_client(handler) as client:
            assert await planes.obtener("abc", "p-1", client=client) == {"id": "p-1", "titulo": "Plan"}
