import json
import pytest
import httpx

from sellpoint_auth.infrastructure.email.http_smtp_adapter import HttpSmtpEmailAdapter

SENDER = "no-reply@sellpoint.pp.ua"


def _adapter(client: httpx.AsyncClient) -> HttpSmtpEmailAdapter:
    return HttpSmtpEmailAdapter(
        base_url="http://smtp-mock:8025/",
        sender=SENDER,
        client=client,
        send_path="send",
    )


@pytest.mark.asyncio
async def test_send_posts_html_mail():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["json"] = json.loads(request.content.decode("utf-8"))
        seen["headers"] = request.headers
        return httpx.Response(202, text="Accepted")

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

    await _adapter(client).send(
        to="a@a.com", subject="Reset Password", html_body="<p>AB12CD</p>"
    )
    assert seen["url"] == "http://smtp-mock:8025/send"
    assert seen["json"] == {
        "from": SENDER,
        "to": ["a@a.com"],
        "subject": "Reset Password",
        "html": "<p>AB12CD</p>",
    }
    assert "Idempotency-Key" not in seen["headers"]

    await client.aclose()


@pytest.mark.asyncio
async def test_send_takes_only_recipient_subject_and_body():
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda _: httpx.Response(200))
    )

    with pytest.raises(TypeError):
        await _adapter(client).send(  # type: ignore[call-arg]
            to="b@a.com", subject="Hi", html_body="<p>Hello</p>", idempotency_key="abc-123"
        )

    await client.aclose()


@pytest.mark.asyncio
async def test_send_non_2xx_raises_runtimeerror():
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(422, text="nope")

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

    with pytest.raises(RuntimeError) as ei:
        await _adapter(client).send(to="x@y.com", subject="S", html_body="B")

    msg = str(ei.value)
    assert "SMTP responded 422" in msg
    assert "nope" in msg

    await client.aclose()


@pytest.mark.asyncio
async def test_network_error_is_wrapped_as_runtimeerror():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

    with pytest.raises(RuntimeError) as ei:
        await _adapter(client).send(to="x@y.com", subject="S", html_body="B")

    assert "SMTP HTTP error:" in str(ei.value)

    await client.aclose()


@pytest.mark.asyncio
async def test_aclose_closes_owned_client_only():
    owned = HttpSmtpEmailAdapter(base_url="http://smtp-mock:8025", sender=SENDER)
    await owned.aclose()
    assert owned._client.is_closed  # type: ignore[attr-defined]

    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200)

    shared_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    not_owned = HttpSmtpEmailAdapter(
        base_url="http://smtp-mock:8025", sender=SENDER, client=shared_client
    )

    await not_owned.aclose()
    assert shared_client.is_closed is False

    await shared_client.aclose()
