"""
SGPM - Fixtures compartidas de pruebas
"""
import json

import httpx
import pytest

BASE_URL = "http://sgpm.test/api"


@pytest.fixture
def mock_client():
    """
    Fábrica de clientes httpx que responden con `handler`.
    Uso:
        async with mock_client(handler) as client:
            ...
    """

    def _factory(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)

    return _factory


@pytest.fixture
def perfil_docente():
    return {
        "id": "u-1",
        "email": "ana.ruiz@usantoto.edu.co",
        "nombre": "Ana",
        "apellido": "Ruiz",
        "facultad": "Ingeniería",
        "role": "Docente",
    }


@pytest.fixture
def storage(perfil_docente):
    """Almacén de sesión equivalente a st.session_state con una sesión válida."""
    return {"token": "abc", "user": json.dumps(perfil_docente)}


@pytest.fixture
def audit_logs():
    return [
        {
            "id": "l-1",
            "entidad": "Plan",
            "accion": "CREATE",
            "descripcion": "Plan creado para Ana",
            "ipAddress": "10.0.0.1",
            "createdAt": "2024-05-01T10:20:30.000Z",
            "usuario": {"id": "u-9", "nombre": "Luis", "apellido": "Pérez", "email": "luis@usantoto.edu.co"},
        },
        {
            "id": "l-2",
            "entidad": "Usuario",
            "accion": "UPDATE",
            "descripcion": "Cambio de rol, facultad y correo",
            "ipAddress": None,
            "createdAt": "2024-05-03T08:00:00.000Z",
            "usuario": {"id": "u-1", "nombre": "Ana", "apellido": "Ruiz", "email": "ana.ruiz@usantoto.edu.co"},
        },
        {
            "id": "l-3",
            "entidad": "Plan",
            "accion": "APROBAR",
            "descripcion": "Plan aprobado por el decano",
            "ipAddress": "10.0.0.2",
            "createdAt": "2024-05-05T23:59:59.000Z",
            "usuario": {"id": "u-9", "nombre": "Luis", "apellido": "Pérez", "email": "luis@usantoto.edu.co"},
        },
    ]
