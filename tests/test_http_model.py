from platformkit.http_model import (
    CORS,
    HEALTH_URL,
    READY_URL,
    REQUEST_ID_HEADER_NAME,
    ErrorResponse,
    ErrorResponseData,
    HttpConfig,
    RequestHandler,
)

import pytest


def _handler(request):
    return request


def test_default_config_values():
    config = HttpConfig.default(8080)
    assert config.port == 8080
    assert config.read_timeout == 30
    assert config.write_timeout == 30
    assert config.idle_timeout == 60
    assert config.shutdown_timeout == 10
    assert config.public_handlers == []
    assert config.private_handlers == []
    assert config.cors == CORS()


def test_defaults_are_not_shared():
    first = HttpConfig.default(1)
    second = HttpConfig.default(2)
    first.register_public_handler("GET", "/a", _handler)
    first.cors.add_origin("origin")
    assert second.public_handlers == []
    assert second.cors.allowed_origins == []


def test_register_public_and_private_handlers():
    config = HttpConfig()
    config.register_public_handler("GET", "/items", _handler)
    config.register_private_handler("POST", "/admin", _handler)
    assert config.public_handlers == [RequestHandler("GET", "/items", _handler)]
    assert config.private_handlers == [RequestHandler("POST", "/admin", _handler)]
    assert config.public_handlers[0].handler is _handler


def test_register_middleware():
    config = HttpConfig()
    assert config.has_middlewares() is False

    def middleware(app):
        return app

    config.register_middleware(middleware)
    assert config.has_middlewares() is True
    assert config.middlewares == [middleware]


def test_cors_accumulates_in_order():
    cors = CORS()
    cors.add_header("X-One", "X-Two")
    cors.add_header("X-Three")
    cors.add_origin("a", "b")
    assert cors.allowed_headers == ["X-One", "X-Two", "X-Three"]
    assert cors.allowed_origins == ["a", "b"]


def test_header_and_url_constants():
    config = HttpConfig()
    config.register_public_handler("GET", READY_URL, _handler)
    config.register_public_handler("GET", HEALTH_URL, _handler)
    assert config.public_handlers == [
        RequestHandler("GET", "/readyz", _handler),
        RequestHandler("GET", "/healthz", _handler),
    ]
    cors = CORS()
    cors.add_header(REQUEST_ID_HEADER_NAME)
    assert cors.allowed_headers == ["X-Request-ID"]


def test_error_response_to_dict_uses_wire_keys():
    data = ErrorResponseData(http_code=422, error_code="CODE", text="message")
    response = ErrorResponse.single(data)
    assert response.to_dict() == {
        "errors": [{"responseCode": 422, "errorCode": "CODE", "text": "message"}]
    }


def test_first_http_code_is_from_first_error():
    response = ErrorResponse(
        [ErrorResponseData(400, "A", "a"), ErrorResponseData(500, "B", "b")]
    )
    assert response.first_http_code() == 400


def test_first_http_code_of_empty_response_raises():
    with pytest.raises(IndexError):
        ErrorResponse().first_http_code()


def test_empty_error_response_serialises_to_empty_list():
    assert ErrorResponse().to_dict() == {"errors": []}