"""Unit tests for Spotify service."""

import httpx
import pytest
from conftest import make_response, token_response

from spotify_kiosk.exceptions import AuthError, ErrorCode, TransportError, UpstreamError
from spotify_kiosk.services import spotify_service


@pytest.mark.asyncio
async def test_exchange_refresh_token_success(mock_http_client, mock_settings):
    """Test refresh token exchange posts client credentials and refresh token."""
    mock_http_client.post.return_value = token_response("new-access-token", 3600)

    access_token, expires_in, rotated = await spotify_service.exchange_refresh_token(mock_http_client, mock_settings)

    assert access_token == "new-access-token"
    assert expires_in == 3600
    assert rotated is None
    call = mock_http_client.post.call_args
    assert call.args[0] == "https://accounts.spotify.com/api/token"
    assert call.kwargs["auth"] == ("test-client-id", "test-client-secret")
    assert call.kwargs["data"] == {"grant_type": "refresh_token", "refresh_token": "test-refresh-token"}


@pytest.mark.asyncio
async def test_exchange_refresh_token_uses_rotated_secret(mock_http_client, mock_settings):
    """Test a rotated refresh token replaces the configured one."""
    mock_http_client.post.return_value = token_response()

    await spotify_service.exchange_refresh_token(mock_http_client, mock_settings, refresh_secret="rotated")

    assert mock_http_client.post.call_args.kwargs["data"]["refresh_token"] == "rotated"


@pytest.mark.asyncio
async def test_exchange_refresh_token_rejected(mock_http_client, mock_settings):
    """Test rejected exchange raises AuthError."""
    mock_http_client.post.return_value = make_response(400, {"error": "invalid_grant"})

    with pytest.raises(AuthError) as exc_info:
        await spotify_service.exchange_refresh_token(mock_http_client, mock_settings)

    assert "Failed to get access token: 400" in str(exc_info.value)
    assert exc_info.value.details["status_code"] == 400


@pytest.mark.asyncio
async def test_exchange_refresh_token_not_configured(mock_http_client, mock_settings):
    """Test missing credentials fail without calling Spotify."""
    mock_settings.spotify_refresh_token = ""

    with pytest.raises(AuthError) as exc_info:
        await spotify_service.exchange_refresh_token(mock_http_client, mock_settings)

    assert exc_info.value.code == ErrorCode.AUTH_NOT_CONFIGURED
    mock_http_client.post.assert_not_called()


@pytest.mark.asyncio
async def test_exchange_refresh_token_invalid_body(mock_http_client, mock_settings):
    """Test token response without access_token raises AuthError."""
    mock_http_client.post.return_value = make_response(200, {"token_type": "Bearer"})

    with pytest.raises(AuthError) as exc_info:
        await spotify_service.exchange_refresh_token(mock_http_client, mock_settings)

    assert "Invalid Spotify auth response" in str(exc_info.value)


@pytest.mark.asyncio
async def test_exchange_refresh_token_network_error(mock_http_client, mock_settings):
    """Test unreachable accounts service raises TransportError."""
    mock_http_client.post.side_effect = httpx.ConnectError("Name or service not known")

    with pytest.raises(TransportError):
        await spotify_service.exchange_refresh_token(mock_http_client, mock_settings)


@pytest.mark.asyncio
async def test_get_access_token_from_cache(mock_http_client, token_cache, mock_settings):
    """Test cached token is returned without an exchange."""
    await token_cache.set_token("cached-token", expires_in=3600)

    credential = await spotify_service.get_access_token(mock_http_client, token_cache, mock_settings)

    assert credential.access_token == "cached-token"
    mock_http_client.post.assert_not_called()


@pytest.mark.asyncio
async def test_get_access_token_stores_rotated_secret(mock_http_client, token_cache, mock_settings):
    """Test a rotated refresh token is used for the next exchange."""
    mock_http_client.post.side_effect = [
        token_response("token-1", refresh_token="rotated"),
        token_response("token-2"),
    ]

    await spotify_service.get_access_token(mock_http_client, token_cache, mock_settings)
    await token_cache.invalidate()
    await spotify_service.get_access_token(mock_http_client, token_cache, mock_settings)

    second_call = mock_http_client.post.call_args_list[1]
    assert second_call.kwargs["data"]["refresh_token"] == "rotated"


@pytest.mark.asyncio
async def test_fetch_currently_playing_success(
    mock_http_client, token_cache, mock_settings, currently_playing_payload
):
    """Test currently-playing payload is passed through with bearer token."""
    mock_http_client.post.return_value = token_response("test-token")
    mock_http_client.get.return_value = make_response(200, currently_playing_payload)

    data = await spotify_service.fetch_currently_playing(mock_http_client, token_cache, mock_settings)

    assert data == currently_playing_payload
    call = mock_http_client.get.call_args
    assert call.args[0] == "https://api.spotify.com/v1/me/player/currently-playing"
    assert call.kwargs["headers"] == {"Authorization": "Bearer test-token"}
    assert call.kwargs["timeout"] == mock_settings.upstream_timeout_seconds


@pytest.mark.asyncio
async def test_fetch_currently_playing_no_content(mock_http_client, token_cache, mock_settings):
    """Test 204 returns None without reading a body."""
    mock_http_client.post.return_value = token_response()
    response = make_response(204)
    response.json.side_effect = AssertionError("204 body must not be parsed")
    mock_http_client.get.return_value = response

    data = await spotify_service.fetch_currently_playing(mock_http_client, token_cache, mock_settings)

    assert data is None
    response.json.assert_not_called()


@pytest.mark.asyncio
async def test_fetch_retries_once_after_401(mock_http_client, token_cache, mock_settings, currently_playing_payload):
    """Test a 401 invalidates the token and retries once with a fresh one."""
    mock_http_client.post.side_effect = [token_response("expired-token"), token_response("fresh-token")]
    mock_http_client.get.side_effect = [make_response(401), make_response(200, currently_playing_payload)]

    data = await spotify_service.fetch_currently_playing(mock_http_client, token_cache, mock_settings)

    assert data == currently_playing_payload
    assert mock_http_client.post.call_count == 2
    assert mock_http_client.get.call_count == 2
    retry_headers = mock_http_client.get.call_args_list[1].kwargs["headers"]
    assert retry_headers == {"Authorization": "Bearer fresh-token"}
    assert (await token_cache.peek()).access_token == "fresh-token"


@pytest.mark.asyncio
async def test_fetch_second_401_is_fatal(mock_http_client, token_cache, mock_settings):
    """Test a second 401 raises instead of retrying again."""
    mock_http_client.post.side_effect = [token_response("token-1"), token_response("token-2")]
    mock_http_client.get.side_effect = [make_response(401), make_response(401)]

    with pytest.raises(UpstreamError) as exc_info:
        await spotify_service.fetch_currently_playing(mock_http_client, token_cache, mock_settings)

    assert exc_info.value.code == ErrorCode.UPSTREAM_UNAUTHORIZED
    assert mock_http_client.get.call_count == 2
    assert mock_http_client.post.call_count == 2
    assert await token_cache.peek() is None


@pytest.mark.asyncio
async def test_fetch_server_error_not_retried(mock_http_client, token_cache, mock_settings):
    """Test non-401 errors are fatal on the first attempt."""
    mock_http_client.post.return_value = token_response()
    mock_http_client.get.return_value = make_response(503)

    with pytest.raises(UpstreamError) as exc_info:
        await spotify_service.fetch_currently_playing(mock_http_client, token_cache, mock_settings)

    assert "Spotify API error: 503" in str(exc_info.value)
    assert mock_http_client.get.call_count == 1


@pytest.mark.asyncio
async def test_fetch_network_error(mock_http_client, token_cache, mock_settings):
    """Test network failure raises TransportError."""
    mock_http_client.post.return_value = token_response()
    mock_http_client.get.side_effect = httpx.ReadTimeout("timed out")

    with pytest.raises(TransportError):
        await spotify_service.fetch_currently_playing(mock_http_client, token_cache, mock_settings)


@pytest.mark.asyncio
async def test_fetch_invalid_json(mock_http_client, token_cache, mock_settings):
    """Test undecodable 200 body raises UpstreamError."""
    mock_http_client.post.return_value = token_response()
    response = make_response(200)
    response.json.side_effect = ValueError("Expecting value")
    mock_http_client.get.return_value = response

    with pytest.raises(UpstreamError) as exc_info:
        await spotify_service.fetch_currently_playing(mock_http_client, token_cache, mock_settings)

    assert exc_info.value.code == ErrorCode.UPSTREAM_INVALID_RESPONSE


@pytest.mark.asyncio
async def test_fetch_recently_played_limit(mock_http_client, token_cache, mock_settings, recently_played_payload):
    """Test recently-played asks for a single entry."""
    mock_http_client.post.return_value = token_response()
    mock_http_client.get.return_value = make_response(200, recently_played_payload)

    data = await spotify_service.fetch_recently_played(mock_http_client, token_cache, mock_settings)

    assert data == recently_played_payload
    call = mock_http_client.get.call_args
    assert call.args[0] == "https://api.spotify.com/v1/me/player/recently-played"
    assert call.kwargs["params"] == {"limit": 1}


@pytest.mark.asyncio
async def test_fetch_recently_played_no_content(mock_http_client, token_cache, mock_settings):
    """Test empty history answer becomes an empty item list."""
    mock_http_client.post.return_value = token_response()
    mock_http_client.get.return_value = make_response(204)

    data = await spotify_service.fetch_recently_played(mock_http_client, token_cache, mock_settings)

    assert data == {"items": []}
