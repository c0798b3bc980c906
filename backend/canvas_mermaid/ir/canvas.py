from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Canvas defaults
NODE_WIDTH = 100
NODE_HEIGHT = 100
GROUP_WIDTH = 200
GROUP_HEIGHT = 150


def _as_record_list(value: Any) -> List[Any]:
    """Accept either a JSON array or a mapping keyed by record id."""
    if value is None:
        return []
    if isinstance(value, dict):
        records = []
        for key, record in value.items():
            if isinstance(record, dict):
                record = {"id": key, **record}
            records.append(record)
        return records
    return list(value)


class CanvasNode(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = ""
    type: str = "text"
    text: Optional[str] = None
    label: Optional[str] = None
    file: Optional[str] = None
    url: Optional[str] = None
    x: float = 0
    y: float = 0
    width: Optional[float] = None
    height: Optional[float] = None
    color: Optional[str] = None
    background_color: Optional[str] = Field(default=None, alias="backgroundColor")
    border_color: Optional[str] = Field(default=None, alias="borderColor")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value):
        if value is None:
            return ""
        return str(value)

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, value):
        return value or "text"

    @field_validator("x", "y", mode="before")
    @classmethod
    def coerce_coordinate(cls, value):
        return value or 0


class CanvasEdge(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = ""
    from_node: str = Field(default="", alias="fromNode")
    to_node: str = Field(default="", alias="toNode")
    label: Optional[str] = None
    color: Optional[str] = None
    width: Optional[float] = None
    style: Optional[str] = None
    to_end: Optional[str] = Field(default=None, alias="toEnd")

    @model_validator(mode="before")
    @classmethod
    def accept_short_endpoints(cls, data):
        # Older exports use "from"/"to"
        if isinstance(data, dict):
            data = dict(data)
            if not data.get("fromNode") and data.get("from"):
                data["fromNode"] = data["from"]
            if not data.get("toNode") and data.get("to"):
                data["toNode"] = data["to"]
        return data

    @field_validator("id", "from_node", "to_node", mode="before")
    @classmethod
    def coerce_ref(cls, value):
        if value is None:
            return ""
        return str(value)


class CanvasGroup(BaseModel):
    """Group record supplied outside the node list."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    label: Optional[str] = None
    text: Optional[str] = None
    x: float = 0
    y: float = 0
    width: Optional[float] = None
    height: Optional[float] = None

    @field_validator("x", "y", mode="before")
    @classmethod
    def coerce_coordinate(cls, value):
        return value or 0


class CanvasData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    nodes: List[CanvasNode] = Field(default_factory=list)
    edges: List[CanvasEdge] = Field(default_factory=list)
    groups: List[CanvasGroup] = Field(default_factory=list)

    @field_validator("nodes", "edges", "groups", mode="before")
    @classmethod
    def coerce_records(cls, value):
        return _as_record_list(value)


CanvasInput = Union[CanvasData, Dict[str, Any]]


def parse_canvas(data: CanvasInput) -> CanvasData:
    if isinstance(data, CanvasData):
        return data
    return CanvasData.model_validate(data or {})
