import httpx
import pytest

from branchmirror.infrastructure.error_handler import (
    AuthenticationError,
    ListingError,
    MirrorError,
    RateLimitError,
    RepositoryNotFoundError,
    UnknownEntryTypeError,
    handle_api_error,
    translate_error,
)


# ---- Helpers ---------------------------------------------------------------

def status_error(status: int, headers=None) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://api.test/repos/acme/widgets")
    response = httpx.Response(status, headers=headers or {}, request=request)
    return httpx.HTTPStatusError(f"status={status}", request=request, response=response)


# ---- Exception classes -----------------------------------------------------

def test_mirror_error_message_and_original():
    original = ValueError("boom")
    err = MirrorError("failed", original)
    assert err.message == "failed"
    assert err.original_error is original
    assert "failed" in str(err)
    assert "Original: boom" in str(err)


@pytest.mark.parametrize("exc_cls", [
    RateLimitError, AuthenticationError, RepositoryNotFoundError,
    ListingError, UnknownEntryTypeError,
])
def test_specific_errors_store_message(exc_cls):
    err = exc_cls("msg")
    assert err.message == "msg"
    assert str(err) == "msg"
    assert isinstance(err, MirrorError)


# ---- translate_error -------------------------------------------------------

@pytest.mark.parametrize("status, headers, expected", [
    (401, None, AuthenticationError),
    (403, None, AuthenticationError),
    (403, {"x-ratelimit-remaining": "0"}, RateLimitError),
    (429, None, RateLimitError),
    (404, None, RepositoryNotFoundError),
])
def test_translate_status_errors(status, headers, expected):
    assert isinstance(translate_error(status_error(status, headers)), expected)


def test_translate_other_status_is_generic():
    err = translate_error(status_error(502))
    assert type(err) is MirrorError
    assert "502" in err.message


def test_translate_request_errors():
    assert isinstance(translate_error(httpx.RequestError("429 Too Many Requests")), RateLimitError)
    assert type(translate_error(httpx.ConnectError("conn reset"))) is MirrorError


def test_translate_keeps_mirror_errors():
    err = ListingError("no tree")
    assert translate_error(err) is err


# ---- handle_api_error decorator -------------------------------------------

def test_handle_api_error_sync_not_found():
    @handle_api_error
    def fn():
        raise status_error(404)

    with pytest.raises(RepositoryNotFoundError):
        fn()


def test_handle_api_error_sync_unexpected():
    @handle_api_error
    def fn():
        raise RuntimeError("boom")

    with pytest.raises(MirrorError) as excinfo:
        fn()
    assert isinstance(excinfo.value.original_error, RuntimeError)


async def test_handle_api_error_async_preserves_return_value():
    @handle_api_error
    async def fn():
        return "ok"

    assert await fn() == "ok"


async def test_handle_api_error_async_translates():
    @handle_api_error
    async def fn():
        raise status_error(401)

    with pytest.raises(AuthenticationError):
        await fn()


async def test_handle_api_error_passes_mirror_errors_through():
    @handle_api_error
    async def fn():
        raise UnknownEntryTypeError("symlink")

    with pytest.raises(UnknownEntryTypeError):
        await fn()
