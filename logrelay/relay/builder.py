"""Construction of outbound requests."""

from __future__ import annotations

from typing import Optional

import requests
from requests.auth import HTTPBasicAuth
from requests.exceptions import RequestException
from requests.utils import check_header_validity

from logrelay.errors import BuildError
from logrelay.services.credential_service import BasicCredentials

from .registry import Destination, validate_target


class RequestBuilder:
    def build(
        self,
        destination: Destination,
        body: Optional[str],
        credentials: Optional[BasicCredentials] = None,
    ) -> requests.PreparedRequest:
        """Prepare the request for one destination.

        Static headers are merged after auth: a header already set keeps its
        value and the configured values are appended to it.
        """
        try:
            validate_target(destination.method, destination.url)
            request = requests.Request(
                method=destination.method,
                url=destination.url,
                data=body.encode("utf-8") if body is not None else None,
            )
            if credentials is not None:
                request.auth = HTTPBasicAuth(
                    credentials.username, credentials.password
                )
            prepared = request.prepare()
            for name, values in destination.headers.items():
                if not values:
                    continue
                value = ", ".join(values)
                check_header_validity((name, value))
                existing = prepared.headers.get(name)
                prepared.headers[name] = f"{existing}, {value}" if existing else value
        except (ValueError, RequestException) as e:
            raise BuildError(destination.name, e) from e
        return prepared


__all__ = ["RequestBuilder"]
