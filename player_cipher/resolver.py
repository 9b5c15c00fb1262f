"""
Applies extracted player functions to format descriptors.

For every format:
1. Decipher: if the format carries a cipher payload, run its signature
   through ``decipher`` and put the result on the base URL under ``sp``.
2. N-transform: if the URL has an ``n`` parameter and the player has an
   n-transform, replace ``n`` with the transformed value.
3. Return a copy of the descriptor holding only the final ``url``.

A fault in the decipher step propagates and aborts the batch; a fault in
the n-transform step only leaves ``n`` as it was.
"""

import logging
from collections.abc import Iterable, Sequence
from typing import Any
from urllib.parse import unquote, urlsplit

from .core.errors import EvaluationError
from .core.sandbox import SandboxEvaluator, build_program
from .models.format import FormatDescriptor
from .utils.helpers import get_query_param, parse_qs_first, set_query_param, truncate

logger = logging.getLogger(__name__)

DECIPHER_ENTRYPOINT = "decipher"
N_TRANSFORM_ENTRYPOINT = "nTransform"
DEFAULT_SIGNATURE_PARAM = "sig"


def split_fragments(fragments: Sequence[str]) -> tuple[str, list[str], str | None]:
    """Split a fragment list into (decipher, helpers, n_transform)."""
    if not fragments:
        raise ValueError("Empty fragment list")
    decipher = fragments[0]
    if len(fragments) < 2:
        return decipher, [], None
    return decipher, list(fragments[1:-1]), fragments[-1]


def build_programs(fragments: Sequence[str]) -> tuple[str, str | None]:
    """Assemble the decipher and n-transform programs shared by a batch."""
    decipher, helpers, n_transform = split_fragments(fragments)
    helpers_joined = ";\n".join(helpers)
    decipher_program = f"{helpers_joined}\nvar {DECIPHER_ENTRYPOINT} = ({decipher});"
    n_program = build_program(n_transform, N_TRANSFORM_ENTRYPOINT) if n_transform else None
    return decipher_program, n_program


def is_js_falsy(value: Any) -> bool:
    """JS truthiness of a value returned from the sandbox (NaN arrives as None)."""
    return value is None or value is False or value == "" or (
        isinstance(value, (int, float)) and not isinstance(value, bool) and value == 0
    )


def js_string(value: Any) -> str:
    """Stringify a sandbox result the way JS ``String(value)`` would."""
    if isinstance(value, str):
        return value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        return ",".join("" if item is None else js_string(item) for item in value)
    return "[object Object]"


class FormatResolver:
    """Resolves format descriptors against one player's programs."""

    def __init__(self, sandbox: SandboxEvaluator | None = None):
        self.sandbox = sandbox or SandboxEvaluator()

    def decipher(self, payload: str, decipher_program: str) -> str | None:
        """Turn a cipher payload into a signed URL."""
        args = parse_qs_first(payload)
        if not args.get("s"):
            logger.debug("No signature to decipher, using the url parameter as is")
            return args.get("url")

        base_url = unquote(args.get("url", ""))
        parts = urlsplit(base_url)
        if not (parts.scheme and parts.netloc):
            raise ValueError(f"Cipher payload has no usable url: {base_url!r}")
        signature = unquote(args["s"])
        logger.debug("Deciphering signature for %s", base_url.split("?")[0])

        result = self.sandbox.run(decipher_program, DECIPHER_ENTRYPOINT, signature)
        if result is None:
            raise EvaluationError(
                "decipher returned no value", entrypoint=DECIPHER_ENTRYPOINT
            )

        key = args.get("sp") or DEFAULT_SIGNATURE_PARAM
        logger.debug("Applied %s=%s", key, truncate(result))
        return set_query_param(base_url, key, js_string(result))

    def transform_n(self, url: str, n_program: str | None) -> str:
        """Replace the ``n`` parameter; any failure leaves the URL unchanged."""
        n = get_query_param(url, "n")
        if not n:
            logger.debug("No 'n' param found, skipping")
            return url
        if not n_program:
            logger.debug("No nTransform program for this player, skipping")
            return url

        logger.debug("Transforming n=%s", truncate(n))
        try:
            result = self.sandbox.run(n_program, N_TRANSFORM_ENTRYPOINT, n)
        except EvaluationError as e:
            logger.debug("nTransform failed, keeping original n: %s", e)
            return url

        if is_js_falsy(result):
            logger.debug("nTransform returned a falsy result, keeping original n")
            return url

        try:
            updated = set_query_param(url, "n", js_string(result))
        except (UnicodeError, ValueError) as e:
            logger.debug("nTransform result cannot be encoded, keeping original n: %s", e)
            return url

        logger.debug("Applied n=%s", truncate(result))
        return updated

    def resolve_one(
        self,
        fmt: FormatDescriptor,
        decipher_program: str,
        n_program: str | None,
    ) -> FormatDescriptor:
        """
        Return a resolved copy of *fmt*.

        The copy has ``url`` set to the final URL and no cipher fields. A
        descriptor with neither a URL nor a cipher payload comes back with
        ``url`` unset.
        """
        payload = fmt.cipher_payload
        url = fmt.url or payload
        if not url:
            logger.warning("Format itag=%s has no url or cipher, skipping", fmt.itag)
            return fmt.model_copy(update={"url": None, "signature_cipher": None, "cipher": None})

        logger.debug("Processing itag=%s cipher=%s", fmt.itag, fmt.needs_decipher)
        if fmt.needs_decipher:
            url = self.decipher(payload, decipher_program)
        if url:
            url = self.transform_n(url, n_program)

        return fmt.model_copy(update={"url": url, "signature_cipher": None, "cipher": None})

    def resolve_formats(
        self,
        formats: Iterable[FormatDescriptor | dict[str, Any]],
        fragments: Sequence[str],
    ) -> dict[str, FormatDescriptor]:
        """
        Resolve every format in input order with programs built once.

        Later formats overwrite earlier ones that resolve to the same URL.
        Raises on decipher faults; the caller owns the batch policy.
        """
        decipher_program, n_program = build_programs(fragments)
        logger.debug("Programs built, nTransform present=%s", n_program is not None)

        resolved: dict[str, FormatDescriptor] = {}
        for item in formats:
            fmt = item if isinstance(item, FormatDescriptor) else FormatDescriptor.model_validate(item)
            result = self.resolve_one(fmt, decipher_program, n_program)
            if result.url:
                resolved[result.url] = result
            else:
                logger.debug("itag=%s produced no URL", fmt.itag)
        return resolved
