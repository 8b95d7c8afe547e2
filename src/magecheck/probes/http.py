from __future__ import annotations

from http.client import HTTPException
from urllib.error import HTTPError
from urllib.request import HTTPRedirectHandler, Request, build_opener

from magecheck.utils.log import logger


class _NoRedirect(HTTPRedirectHandler):
    def redirect_request(self, req, fp, code, msg, headers, newurl):  # noqa: ANN001
        return None


class UrllibProber:
    """
    Status-only HTTP probe.

    Redirects are not followed: a redirect to a login or home page is not
    the file being served.
    """

    def __init__(self, method: str = "POST") -> None:
        self.method = str(method or "POST").strip().upper()
        self._opener = build_opener(_NoRedirect)

    def probe(self, url: str, timeout: float) -> int | None:
        data = b"" if self.method == "POST" else None
        try:
            req = Request(url, data=data, method=self.method)
            with self._opener.open(req, timeout=timeout) as resp:
                return int(resp.status)
        except HTTPError as ex:
            return int(ex.code)
        except (OSError, HTTPException) as ex:
            # URLError, timeouts, TLS errors and peers that do not speak HTTP
            logger.info("http_probe_failed", url=url, error=f"{type(ex).__name__}: {ex}")
            return None
        except ValueError as ex:
            # malformed URL (e.g. empty base URL)
            logger.info("http_probe_invalid_url", url=url, error=str(ex))
            return None
