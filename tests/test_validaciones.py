"""
Unit Tests for form validation
Tests for: institutional emails, password change rules, user form, name splitting
"""
import pytest

from sgpm.auth.validaciones import (
    separar_nombre,
    validar_cambio_contrasena,
    validar_usuario,
    validate_email,
)


class TestValidateEmail:
    @pytest.mark.parametrize("email", ["ana@usantoto.edu.co", " Luis@USTATUNJA.edu.co "])
    def test_institutional_email_is_valid(self, email):
        assert validate_email(email) is None

    def test_empty_email(self):
        assert validate_email("") == "El campo de correo es obligatorio."

    def test_malformed_email(self):
        assert validate_email("ana.usantoto.edu.co") == "El formato del correo es inválido."

    @pytest.mark.parametrize("email", ["ana@evil.com@usantoto.edu.co", "ana@@usantoto.edu.co"])
    def test_more_than_one_at_sign(self, email):
        """Test an institutional suffix after a second @ is not accepted"""
        assert validate_email(email) == "El formato del correo es inválido."

    def test_external_domain(self):
        assert validate_email("ana@gmail.com").startswith("Solo se permiten correos institucionales")


class TestCambioContrasena:
    def test_valid_change(self):
        assert validar_cambio_contrasena("vieja123", "nueva123", "nueva123") == {}

    def test_all_missing(self):
        errores = validar_cambio_contrasena("", "", "")

        assert set(errores) == {"currentPassword", "newPassword", "confirmPassword"}

    def test_short_password(self):
        errores = validar_cambio_contrasena("vieja123", "abc", "abc")

        assert errores == {"newPassword": "La contraseña debe tener al menos 6 caracteres"}

    def test_mismatch(self):
        errores = validar_cambio_contrasena("vieja123", "nueva123", "nueva124")

        assert errores == {"confirmPassword": "Las contraseñas no coinciden"}

    def test_same_as_current(self):
        errores = validar_cambio_contrasena("igual123", "igual123", "igual123")

        assert errores == {"newPassword": "La nueva contraseña debe ser diferente a la actual"}


class TestValidarUsuario:
    def test_docente_requires_faculty(self):
        errores = validar_usuario("Ana Ruiz", "ana@usantoto.edu.co", "docente", None)

        assert list(errores) == ["facultad"]

    def test_admin_without_faculty(self):
        assert validar_usuario("Ana Ruiz", "ana@usantoto.edu.co", "administrador", None) == {}

    def test_missing_name_and_bad_email(self):
        errores = validar_usuario("  ", "ana@gmail.com", "decano", "s-1")

        assert set(errores) == {"nombre", "email"}


class TestSepararNombre:
    @pytest.mark.parametrize(
        "completo, esperado",
        [
            ("Ana María Ruiz", ("Ana", "María Ruiz")),
            ("Ana Ruiz", ("Ana", "Ruiz")),
            ("Ana", ("Ana", "Ana")),
            ("", ("", "")),
        ],
    )
    def test_split(self, completo, esperado):
        assert separar_nombre(completo) == esperado
