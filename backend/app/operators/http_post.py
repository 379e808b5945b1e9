"""Operator that POSTs the first text field of each record to a web server.

Every inbound record is sent synchronously to ``settings.url`` and an
outbound record carrying ``statusCode``, ``statusMessage`` and
``responseMessage`` is submitted, together with any inbound fields that
also exist in the output schema. It is mainly used to exercise the HTTP(S)
ingestion feature of the WebSocket source.
"""
from __future__ import annotations

import codecs
import logging
import re
from dataclasses import dataclass
from urllib.parse import urlencode

import requests
from werkzeug.http import parse_options_header

from .client import ClientFactory, build_http_client, create_client, is_tls_url
from .errors import DispatchError, OperatorConfigurationError, RecordError
from .records import Record, StreamSchema
from .runtime import OperatorContext, Punctuation, StreamingOutput

logger = logging.getLogger(__name__)

FORM_URLENCODED = "application/x-www-form-urlencoded"
TRANSPORT_ERROR_POLICIES = ("skip", "raise")

RESULT_ATTRIBUTES: dict[str, type] = {
    "statusCode": int,
    "statusMessage": str,
    "responseMessage": str,
}

_TOKEN = r"[!#$%&'*+.^_`|~0-9A-Za-z-]+"
_MIME_TYPE_RE = re.compile(rf"^{_TOKEN}/{_TOKEN}$")


@dataclass(frozen=True)
class HttpPostSettings:
    """Operator parameters, fixed for the lifetime of the operator."""

    url: str
    content_type: str = "text/plain"
    log_http_post_actions: bool = False
    trust_all_certificates: bool = False
    transport_error_policy: str = "skip"
    timeout: float | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.url, str) or not self.url.strip():
            raise OperatorConfigurationError("url is required")
        if self.transport_error_policy not in TRANSPORT_ERROR_POLICIES:
            raise OperatorConfigurationError(
                f"transport_error_policy must be one of {', '.join(TRANSPORT_ERROR_POLICIES)}"
            )
        if self.timeout is not None and self.timeout <= 0:
            raise OperatorConfigurationError("timeout must be positive")

    @property
    def form_encoded(self) -> bool:
        return self.content_type.lower() == FORM_URLENCODED


def parse_content_type(value: str) -> tuple[str, str | None] | None:
    """Return ``(mime_type, charset)`` or ``None`` when the value is unusable."""

    if not isinstance(value, str) or not value.strip():
        return None
    # Header values go on the wire as latin-1.
    try:
        value.encode("latin-1")
    except UnicodeEncodeError:
        return None
    mime_type, params = parse_options_header(value)
    mime_type = mime_type.strip()
    if not _MIME_TYPE_RE.match(mime_type):
        return None
    charset = params.get("charset")
    if charset:
        try:
            codecs.lookup(charset)
        except LookupError:
            return None
    return mime_type, charset or None


def validate_output_schema(schema: StreamSchema) -> None:
    for name, attr_type in RESULT_ATTRIBUTES.items():
        attribute = schema.get(name)
        if attribute is None or attribute.type is not attr_type:
            raise OperatorConfigurationError(
                f"output schema needs {name}:{attr_type.__name__}"
            )


def _http_version(response: requests.Response) -> str:
    version = getattr(response.raw, "version", 11)
    return "HTTP/1.0" if version == 10 else "HTTP/1.1"


class HttpPostOperator:
    """Sends one HTTP(S) POST per inbound record."""

    def __init__(
        self,
        settings: HttpPostSettings,
        client_factory: ClientFactory = build_http_client,
    ):
        self.settings = settings
        self._client_factory = client_factory
        self._client: requests.Session | None = None
        self._context = OperatorContext()
        self._output: StreamingOutput | None = None
        self.http_post_count = 0

    @property
    def client(self) -> requests.Session | None:
        return self._client

    def initialize(self, context: OperatorContext, output: StreamingOutput) -> None:
        validate_output_schema(output.schema)
        self._context = context
        self._output = output
        logger.debug("%s initializing", context.describe())

        if is_tls_url(self.settings.url) and self.settings.trust_all_certificates:
            logger.warning(
                "%s runs in insecure test mode: TLS certificates and host names are not verified",
                context.describe(),
            )

        self._client = create_client(self.settings, self._client_factory)

    def all_ports_ready(self) -> None:
        logger.debug("%s all ports are ready", self._context.describe())

    def process(self, record: Record) -> None:
        if self._output is None:
            raise RuntimeError("operator has not been initialized")

        out_record = self._output.new_record()
        out_record.assign(record)

        client = self._client
        if client is None:
            return

        parsed = parse_content_type(self.settings.content_type)
        if parsed is None:
            logger.error(
                "%s: unable to create a MIME content type object from %r",
                self._context.describe(),
                self.settings.content_type,
            )
            return
        _, charset = parsed

        try:
            body = self._build_body(record, charset)
        except RecordError as exc:
            logger.error("%s: record skipped: %s", self._context.describe(), exc)
            return

        headers = {
            "Content-Type": self.settings.content_type,
            "connection": "keep-alive",
        }

        self.http_post_count += 1
        count = self.http_post_count
        if self.settings.log_http_post_actions:
            logger.info("%d) Executing request POST %s HTTP/1.1", count, self.settings.url)

        response = None
        try:
            response = client.post(
                self.settings.url,
                data=body,
                headers=headers,
                timeout=self.settings.timeout,
            )
            status_code = response.status_code
            status_message = response.reason or ""
            response_message = response.text if response.content else ""
        except requests.RequestException as exc:
            if self.settings.transport_error_policy == "raise":
                raise DispatchError(f"POST to {self.settings.url} failed: {exc}") from exc
            logger.error(
                "%s: POST %d to %s failed, record skipped: %s",
                self._context.describe(),
                count,
                self.settings.url,
                exc,
            )
            return
        finally:
            if response is not None:
                response.close()

        if self.settings.log_http_post_actions:
            logger.info(
                "%d) Response=%s %d %s %s",
                count,
                _http_version(response),
                status_code,
                status_message,
                response_message,
            )

        out_record.set("statusCode", status_code)
        out_record.set("statusMessage", status_message)
        out_record.set("responseMessage", response_message)
        self._output.submit(out_record)

    def _build_body(self, record: Record, charset: str | None) -> bytes:
        attribute, _ = record.first()
        text = record.get_string(attribute.name)
        if self.settings.form_encoded:
            return urlencode([(attribute.name, text)], encoding="utf-8").encode("ascii")
        return text.encode(charset or "utf-8")

    def process_punctuation(self, mark: Punctuation) -> None:
        if self._output is not None:
            self._output.punctuate(mark)

    def shutdown(self) -> None:
        logger.debug("%s shutting down", self._context.describe())
        client, self._client = self._client, None
        if client is not None:
            client.close()
