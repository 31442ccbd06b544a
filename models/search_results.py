from dataclasses import dataclass, field
from typing import Any, Literal

EngineErrorType = Literal["empty_result_set", "request", "unexpected"]

ERROR_SEVERITY: dict[str, int] = {
    "empty_result_set": 1,
    "request": 2,
    "unexpected": 3,
}


@dataclass
class SearchResult:
    title: str
    url: str
    description: str = ""
    engines: list[str] = field(default_factory=list)

    def add_engine(self, engine: str) -> None:
        if engine not in self.engines:
            self.engines.append(engine)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "description": self.description,
            "engines": list(self.engines),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SearchResult":
        return cls(
            title=data.get("title", ""),
            url=data.get("url", ""),
            description=data.get("description", ""),
            engines=list(data.get("engines", [])),
        )


@dataclass(frozen=True)
class EngineErrorInfo:
    engine: str
    error_type: str
    severity: int = 0

    def __post_init__(self):
        if self.error_type not in ERROR_SEVERITY:
            object.__setattr__(self, "error_type", "unexpected")
        if not self.severity:
            object.__setattr__(self, "severity", ERROR_SEVERITY[self.error_type])

    def to_dict(self) -> dict[str, Any]:
        return {"engine": self.engine, "error_type": self.error_type, "severity": self.severity}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EngineErrorInfo":
        return cls(
            engine=data.get("engine", "unknown"),
            error_type=data.get("error_type", "unexpected"),
            severity=int(data.get("severity", 0)),
        )


@dataclass
class ResultBundle:
    """
    Search results for one (query, page) pair.

    The status flags are independent annotations for the renderer:
    - disallowed: the query hit the strict-tier blocklist
    - filtered: no engine failed, yet nothing came back
    - no_engines_selected: the user deselected every upstream engine
    """

    results: list[SearchResult] = field(default_factory=list)
    engine_errors: list[EngineErrorInfo] = field(default_factory=list)
    disallowed: bool = False
    filtered: bool = False
    no_engines_selected: bool = False
    safe_search_level: int = 0

    def set_disallowed(self) -> None:
        self.disallowed = True

    def set_filtered(self) -> None:
        self.filtered = True

    def set_no_engines_selected(self) -> None:
        self.no_engines_selected = True

    def set_safe_search_level(self, level: int) -> None:
        self.safe_search_level = level

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "engine_errors": [e.to_dict() for e in self.engine_errors],
            "disallowed": self.disallowed,
            "filtered": self.filtered,
            "no_engines_selected": self.no_engines_selected,
            "safe_search_level": self.safe_search_level,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResultBundle":
        return cls(
            results=[SearchResult.from_dict(r) for r in data.get("results", [])],
            engine_errors=[EngineErrorInfo.from_dict(e) for e in data.get("engine_errors", [])],
            disallowed=bool(data.get("disallowed", False)),
            filtered=bool(data.get("filtered", False)),
            no_engines_selected=bool(data.get("no_engines_selected", False)),
            safe_search_level=int(data.get("safe_search_level", 0)),
        )
