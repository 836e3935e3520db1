"""
Tests for the exception hierarchy and the HTTP error handlers.
"""

import json

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from storefront.exception_handlers import create_error_response, register_exception_handlers
from storefront.exceptions import (
    BootstrapError,
    BuildDirectoryError,
    BuildError,
    CompileError,
    ConfigurationError,
    ConfigValidationError,
    DuplicateFinalProcessorError,
    DuplicateReplaceHookError,
    ErrorCode,
    ExtensibilityError,
    InvalidModuleDescriptorError,
    LockedHooksError,
    LockedRegistryError,
    ProcessorError,
    RouteDeclarationError,
    StorefrontError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        ("exc", "parent", "code"),
        [
            (InvalidModuleDescriptorError("bad", module="x"), ConfigurationError, ErrorCode.MODULE_DESCRIPTOR_INVALID),
            (RouteDeclarationError("bad", "x", "/p"), ConfigurationError, ErrorCode.ROUTE_DECLARATION_INVALID),
            (
                ConfigValidationError([{"field": "a", "message": "b"}]),
                ConfigurationError,
                ErrorCode.CONFIG_SCHEMA_VIOLATION,
            ),
            (BootstrapError("x", "boom"), StorefrontError, ErrorCode.BOOTSTRAP_FAILED),
            (LockedRegistryError("points"), ExtensibilityError, ErrorCode.REGISTRY_LOCKED),
            (LockedHooksError("fn"), ExtensibilityError, ErrorCode.HOOKS_LOCKED),
            (DuplicateFinalProcessorError("points"), ExtensibilityError, ErrorCode.FINAL_PROCESSOR_DUPLICATE),
            (DuplicateReplaceHookError("fn"), ExtensibilityError, ErrorCode.REPLACE_HOOK_DUPLICATE),
            (ProcessorError("bad", "points"), ExtensibilityError, ErrorCode.PROCESSOR_FAILED),
            (BuildDirectoryError("/tmp/b", "denied"), BuildError, ErrorCode.BUILD_DIRECTORY_FAILED),
            (CompileError("bad", route="GET /"), BuildError, ErrorCode.COMPILE_FAILED),
        ],
    )
    def test_codes_and_parents(self, exc, parent, code):
        assert isinstance(exc, parent)
        assert isinstance(exc, StorefrontError)
        assert exc.error_code is code

    def test_base_defaults(self):
        exc = StorefrontError("plain")

        assert exc.error_code is ErrorCode.UNKNOWN_ERROR
        assert exc.details == {}
        assert str(exc) == "plain"

    def test_explicit_code_overrides_default(self):
        exc = ConfigurationError("x", error_code=ErrorCode.CONFIG_SCHEMA_VIOLATION)

        assert exc.error_code is ErrorCode.CONFIG_SCHEMA_VIOLATION

    def test_bootstrap_error_names_module(self):
        exc = BootstrapError("checkout", "boom")

        assert exc.module == "checkout"
        assert exc.message == "Bootstrap of module 'checkout' failed: boom"
        assert exc.details == {"module": "checkout"}

    def test_validation_error_keeps_all_errors(self):
        errors = [{"field": f"f{i}", "message": "bad"} for i in range(8)]

        exc = ConfigValidationError(errors)

        assert exc.errors == errors
        assert exc.details["validation_errors"] == errors
        assert "f4" in exc.message
        assert "f5" not in exc.message

    def test_compile_error_omits_empty_details(self):
        assert CompileError("bad").details == {}


class TestErrorResponses:
    def test_create_error_response(self):
        response = create_error_response(422, "Invalid", ErrorCode.CONFIG_INVALID, {"a": 1}, "/x")

        assert response.status_code == 422
        assert json.loads(response.body) == {
            "error": {
                "status_code": 422,
                "message": "Invalid",
                "error_code": "CONFIG_INVALID",
                "details": {"a": 1},
                "path": "/x",
            }
        }

    def test_storefront_error_is_server_error(self):
        app = FastAPI()
        register_exception_handlers(app)

        @app.get("/boom")
        async def boom():
            raise ProcessorError("Value of extension point 'x' failed validation", extension_point="x")

        response = TestClient(app).get("/boom")

        assert response.status_code == 500
        assert response.json()["error"]["error_code"] == "PROCESSOR_FAILED"
        assert response.json()["error"]["details"] == {"extension_point": "x"}

    def test_unhandled_error_hides_details(self):
        app = FastAPI()
        register_exception_handlers(app)

        @app.get("/boom")
        async def boom():
            raise RuntimeError("secret internals")

        response = TestClient(app, raise_server_exceptions=False).get("/boom")

        assert response.status_code == 500
        assert "secret" not in response.text
        assert response.json()["error"]["error_code"] == "UNKNOWN_ERROR"
