from __future__ import annotations

import base64
import functools
import json
import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from http.cookiejar import DefaultCookiePolicy
from typing import TYPE_CHECKING, Any, Literal, Self

import requests
from pydantic import ValidationError

from .credentials import AppCredentials
from .exceptions import (
    UntisAuthenticationError,
    UntisConfigurationError,
    UntisParsingError,
    UntisRpcError,
)
from .objects import Session

if TYPE_CHECKING:  # pragma: no cover
    from requests import Response

    from .credentials import Credentials

__all__ = ["Untis", "Route", "AuthenticationType"]

logger = logging.getLogger(__name__)

Route = Literal["public", "rest", "token"]
AuthenticationType = Literal["cookie", "token"]

JSONRPC_VERSION = "2.0"
DEFAULT_TIMEOUT = 30


def _handle_session(func):
    @functools.wraps(func)
    def inner(self: Untis, *args, session: Session | None = None, **kwargs):
        if session is None:
            session = self.get_session()  # Authenticates when there is no live session yet

        return func(self, *args, session=session, **kwargs)

    return inner


def _masked(params: Any) -> Any:
    if isinstance(params, dict) and "password" in params:
        return {k: (v if k != "password" else "********") for k, v in params.items()}
    return params


@dataclass
class Untis:
    """
    Client for one WebUntis account.

    Holds the configuration, the single backend session and the HTTP session used
    for every call. Nothing is shared between two instances.

    Example:
    -------
    >>> untis = Untis.start(EnvCredentials())
    >>> for lesson in TimeTable(untis):
    >>>     print(lesson.date, lesson.start_time)
    20240307 800

    """

    creds: Credentials = field(default_factory=AppCredentials)
    timeout: float = DEFAULT_TIMEOUT
    session: Session | None = field(init=False, default=None)
    _http: requests.Session = field(init=False, default_factory=requests.Session)
    _lock: threading.Lock = field(init=False, default_factory=threading.Lock)
    _expiry_timer: threading.Timer | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        # The session cookie is rebuilt for every request from the resolved session,
        # so nothing the server sets may be replayed from the jar.
        self._http.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))

    @classmethod
    def start(cls, creds: Credentials, **kwargs) -> Self:
        creds.validate()
        return cls(creds=creds, **kwargs)

    # Configuration setters, read on every request
    def set_host(self, host: str) -> None:
        self.creds.host = host

    def set_school(self, school: str) -> None:
        self.creds.school = school

    def set_user(self, username: str) -> None:
        self.creds.username = username

    def set_password(self, password: str) -> None:
        self.creds.password = password

    @property
    def _url(self) -> str:
        if not self.creds.host:
            raise UntisConfigurationError("No WebUntis host configured, call `set_host` first.")
        return f"https://{self.creds.host}/WebUntis"

    def create_url(self, route: Route, path: str = "") -> str:
        """Create the URL of a REST-style endpoint."""
        return f"{self._url}/api/{route}/{path}"

    def build_cookie(self, session: Session | None = None) -> str | None:
        """
        The ``Cookie`` header value, or None without school or session.

        ``session`` defaults to the live one; callers that already resolved a
        session pass it so a concurrent expiry cannot strip the cookie.
        """
        if session is None:
            session = self.session
        if not self.creds.school or session is None:
            return None

        cookie = {
            "JSESSIONID": session.session_id,
            "schoolname": base64.b64encode(self.creds.school.encode("utf-8")).decode("ascii"),
        }
        return "; ".join(f"{key}={value}" for key, value in cookie.items())

    # Session management
    def get_session(self) -> Session:
        """
        Return the live session, authenticating first when there is none.

        Only one thread authenticates at a time; threads waiting on it receive the
        session it created. The session is dropped again after
        ``now - latestImportTime`` has passed.
        """
        current = self.session
        if current is not None:
            return current

        with self._lock:
            if self.session is not None:
                return self.session

            new_session = self.authenticate()
            self.session = new_session
            logger.info(f"Authenticated as {self.creds.username} (personId={new_session.person_id}, personType={new_session.person_type.name})")

            try:
                latest_import_time = self.get_latest_import_time(new_session)
            except Exception:
                logger.warning("Could not read the latest import time, discarding the new session.")
                self.session = None
                raise

            self._schedule_expiry(new_session, latest_import_time)
            return new_session

    def _schedule_expiry(self, session: Session, latest_import_time: int) -> None:
        delay = (time.time() * 1000 - latest_import_time) / 1000
        logger.debug(f"Latest import time {latest_import_time}, session expires in {delay:.3f}s")

        self._cancel_expiry()
        timer = threading.Timer(min(delay, threading.TIMEOUT_MAX), self._expire, args=(session,))
        timer.daemon = True
        self._expiry_timer = timer
        timer.start()

    def _cancel_expiry(self) -> None:
        if self._expiry_timer is not None:
            self._expiry_timer.cancel()
            self._expiry_timer = None

    def _expire(self, session: Session) -> None:
        with self._lock:
            if self.session is session:  # A newer session keeps living
                logger.info("Session expired, the next request will authenticate again.")
                self.session = None
                self._expiry_timer = None

    def logout(self) -> None:
        """End the backend session. The local session is dropped even if the call fails."""
        current = self.session
        if current is None:
            logger.debug("logout: no active session")
            return

        try:
            self.json_rpc("logout", session=current)
        finally:
            with self._lock:
                self._cancel_expiry()
                self.session = None
            logger.info("Logged out")

    def close(self) -> None:
        with self._lock:
            self._cancel_expiry()
        self._http.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        try:
            self.logout()
        finally:
            self.close()

    # JSON-RPC calls, usable without a session
    def authenticate(self) -> Session:
        try:
            result = self.json_rpc("authenticate", {"user": self.creds.username, "password": self.creds.password})
        except UntisRpcError as e:
            raise UntisAuthenticationError(f"Authentication failed for {self.creds.username}: {e.message}") from e

        if not result:
            raise UntisAuthenticationError(f"Authentication for {self.creds.username} returned no session")

        try:
            return Session.model_validate(result)
        except ValidationError as e:
            raise UntisAuthenticationError(f"Authentication returned an unexpected session: {result!r}") from e

    def get_latest_import_time(self, session: Session | None = None) -> int:
        """Epoch milliseconds of the last data import on the backend."""
        result = self.json_rpc("getLatestImportTime", session=session)
        if not isinstance(result, (int, float)):
            raise UntisParsingError(f"getLatestImportTime returned {result!r}")
        return int(result)

    def json_rpc(self, method: str, params: Any = None, session: Session | None = None) -> Any:
        """
        POST a JSON-RPC 2.0 call to ``jsonrpc.do`` and return its ``result``.

        The cookie is built from ``session``, or from the live session when none is given.
        """
        url = f"{self._url}/jsonrpc.do"
        payload = {
            "id": uuid.uuid4().hex,
            "method": method,
            "params": params if params is not None else {},
            "jsonrpc": JSONRPC_VERSION,
        }
        headers = {}
        cookie = self.build_cookie(session)
        if cookie is not None:
            headers["Cookie"] = cookie

        logger.debug(f"JSON-RPC {method} -> {url}, params={_masked(params)}")
        response = self._http.request(
            "POST",
            url,
            params={"school": self.creds.school},
            json=payload,
            headers=headers,
            timeout=self.timeout,
        )
        response.raise_for_status()

        envelope = self._decode_json(response)
        if not isinstance(envelope, dict):
            raise UntisParsingError(f"JSON-RPC {method} returned a non-object body: {envelope!r}")

        error = envelope.get("error")
        if error:
            if isinstance(error, dict):
                raise UntisRpcError(error.get("code"), error.get("message", ""), method)
            raise UntisRpcError(None, str(error), method)

        if "result" not in envelope:
            raise UntisParsingError(f"JSON-RPC {method} returned neither result nor error")

        return envelope["result"]

    # REST-style calls, always with a session
    @_handle_session
    def api_request(
        self,
        method: str,
        route: Route,
        path: str = "",
        params: dict[str, Any] | None = None,
        authentication: AuthenticationType = "cookie",
        session: Session | None = None,
    ) -> Any:
        """
        Call ``/WebUntis/api/{route}/{path}`` and return the decoded body.

        With ``authentication="token"`` a fresh bearer token is fetched and sent
        instead of the session cookie. Bodies that are not JSON come back as text.
        ``session`` is the one resolved before the call; it is looked up when omitted.
        """
        url = self.create_url(route, path)
        headers = {"Content-Type": "application/json"}

        if authentication == "token":
            headers["Authorization"] = f"Bearer {self.get_jwt_token(session)}"
        else:
            cookie = self.build_cookie(session)
            if cookie is not None:
                headers["Cookie"] = cookie

        logger.debug(f"{method.upper()} {url}, params={params}, authentication={authentication}")
        response = self._http.request(method.upper(), url, params=params, headers=headers, timeout=self.timeout)
        response.raise_for_status()

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def get_jwt_token(self, session: Session | None = None) -> str:
        """Request a short-lived bearer token for the REST API, authenticated with the session cookie."""
        token = self.api_request("GET", "token", "new", session=session)
        if not isinstance(token, str) or not token:
            raise UntisParsingError(f"token/new returned {token!r}")
        return token.strip()

    def _decode_json(self, response: Response) -> Any:
        """Parse a JSON body, unwrapping it again when it was encoded twice."""
        json_ = response.text
        try:
            while isinstance(json_, str):
                if not json_:
                    raise UntisParsingError(f"Empty response body from {response.url}")
                json_ = json.loads(json_)
            return json_
        except json.JSONDecodeError as e:
            logger.error(f"JSONDecodeError encountered for URL: {response.url}")
            logger.error(f"Response status code: {response.status_code}")
            logger.error(response.text[:1000])
            raise UntisParsingError(f"Failed to decode JSON from {response.url}: {e.msg}") from e

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(for: {self.creds.username})"
