"""
Maps a raw Google profile onto a ProfileRecord.

Which attributes end up in ``ProfileRecord.extra`` is driven by the
configured data points.
"""
from typing import Any, Callable, Iterable, Optional

from google_login.errors import UnknownDataPoint
from google_login.logging_config import get_logger
from google_login.models.identity import ProfileRecord

logger = get_logger(component="identity_mapper")

Extractor = Callable[[dict], Optional[Any]]


def _extract_id(raw: dict) -> Optional[Any]:
    # OpenID Connect user-info uses "sub", the legacy v2 endpoint "id"
    return raw.get("sub") or raw.get("id")


EXTRACTORS: dict[str, Extractor] = {
    "id": _extract_id,
    "name": lambda raw: raw.get("name"),
    "email": lambda raw: raw.get("email"),
    "avatar": lambda raw: raw.get("picture"),
}


def _passthrough(data_point: str) -> Extractor:
    return lambda raw: raw.get(data_point)


def _as_text(value: Optional[Any]) -> str:
    return "" if value is None else str(value)


class IdentityMapper:
    """Extracts the requested data points from a raw profile."""

    def __init__(self, data_points: Iterable[str]):
        self.data_points: list[str] = []
        self._extractors: dict[str, Extractor] = {}

        for data_point in data_points:
            data_point = data_point.strip()
            if not data_point or data_point in self._extractors:
                continue
            extractor = EXTRACTORS.get(data_point)
            if extractor is None:
                logger.debug("data_point_passthrough", data_point=data_point)
                extractor = _passthrough(data_point)
            self.data_points.append(data_point)
            self._extractors[data_point] = extractor

    def map(self, raw: dict) -> ProfileRecord:
        """
        Normalize a raw profile.

        Args:
            raw: Decoded user-info response

        Returns:
            ProfileRecord whose ``extra`` holds every requested data point
            that resolved to a value. Missing ones are logged and omitted.
        """
        extra: dict[str, Any] = {}
        for data_point in self.data_points:
            value = self._extractors[data_point](raw)
            if value is None or value == "":
                error = UnknownDataPoint(f"Failed to fetch data point: {data_point}")
                logger.warning(
                    "data_point_missing",
                    data_point=data_point,
                    error_kind=error.kind,
                    detail=str(error),
                )
                continue
            extra[data_point] = value

        return ProfileRecord(
            id=_as_text(_extract_id(raw)),
            name=_as_text(raw.get("name")),
            email=_as_text(raw.get("email")),
            avatar_url=_as_text(raw.get("picture")),
            extra=extra,
        )
