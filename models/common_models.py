from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

Row = Dict[str, Any]
Vector3 = Tuple[float, float, float]


class ColumnType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"


class Column(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: ColumnType = ColumnType.STRING


class Table(BaseModel):
    """
    Parsed upload: ordered columns plus rows keyed by column name.
    Every row carries exactly the column key set.
    """
    columns: List[Column]
    data: List[Row]
    row_count: int
    column_count: int

    @model_validator(mode="after")
    def _check_shape(self) -> "Table":
        names = self.column_names
        if len(set(names)) != len(names):
            raise ValueError("Column names must be unique.")
        if self.row_count != len(self.data):
            raise ValueError("row_count does not match the number of rows.")
        if self.column_count != len(self.columns):
            raise ValueError("column_count does not match the number of columns.")
        expected = set(names)
        for index, row in enumerate(self.data):
            if set(row) != expected:
                raise ValueError(f"Row {index} does not match the column set.")
        return self

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def column_values(self, name: str) -> List[Any]:
        return [row[name] for row in self.data]


class ChartType(str, Enum):
    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    DOUGHNUT = "doughnut"
    SCATTER = "scatter"
    RADAR = "radar"
    POLAR_AREA = "polarArea"
    BAR_3D = "3d-bar"
    LINE_3D = "3d-line"
    SCATTER_3D = "3d-scatter"
    PIE_3D = "3d-pie"

    @property
    def is_3d(self) -> bool:
        return self.value.startswith("3d-")


class ChartRequest(BaseModel):
    chart_type: ChartType
    x_axis: str
    y_axis: str
    z_axis: Optional[str] = None
    title: Optional[str] = None


# 2D series

class ChartDataset(BaseModel):
    label: str
    data: List[Optional[float]]
    background_color: Union[str, List[str]]
    border_color: Optional[str] = None
    border_width: int = 1
    fill: bool = False


class Chart2DSeries(BaseModel):
    chart_type: ChartType
    title: str
    labels: List[Any]
    datasets: List[ChartDataset]


class ScatterPoint(BaseModel):
    x: Any
    y: Optional[float]


class ScatterDataset(BaseModel):
    label: str
    data: List[ScatterPoint]
    background_color: List[str]
    border_width: int = 1


class ScatterSeries(BaseModel):
    chart_type: ChartType = ChartType.SCATTER
    title: str
    datasets: List[ScatterDataset]


# 3D series

class Bar3D(BaseModel):
    position: Vector3
    height: float
    value: Optional[float]
    label: Optional[float] = None
    color: str


class Bar3DSeries(BaseModel):
    chart_type: ChartType = ChartType.BAR_3D
    title: str
    bars: List[Bar3D]


class Line3DSeries(BaseModel):
    chart_type: ChartType = ChartType.LINE_3D
    title: str
    points: List[Vector3]
    color: str


class Point3D(BaseModel):
    position: Vector3
    value: Optional[float]
    label: Any = None
    color: str
    size: float


class Scatter3DSeries(BaseModel):
    chart_type: ChartType = ChartType.SCATTER_3D
    title: str
    points: List[Point3D]


class PieWedge(BaseModel):
    start_angle: float
    end_angle: float
    span: float
    value: Optional[float]
    percent_label: Optional[str] = None
    color: str


class Pie3DSeries(BaseModel):
    chart_type: ChartType = ChartType.PIE_3D
    title: str
    total: float
    radius: float
    height: float
    wedges: List[PieWedge]


ChartSeries = Union[
    Chart2DSeries, ScatterSeries, Bar3DSeries, Line3DSeries, Scatter3DSeries, Pie3DSeries
]


# API payloads

class UploadSummary(BaseModel):
    id: int
    file_name: str
    columns: List[Column]
    data: List[Row] = Field(default_factory=list)
    row_count: int
    column_count: int


class UploadResponse(BaseModel):
    message: str
    upload: UploadSummary


class PreviewResponse(BaseModel):
    columns: List[Column]
    rows: List[Row]


class ChartProjectionRequest(ChartRequest):
    upload_id: int
    compact: bool = False


class AnalysisCreate(BaseModel):
    upload_id: int
    chart_type: ChartType
    x_axis: str
    y_axis: str
    z_axis: Optional[str] = None
    options: Dict[str, Any] = Field(default_factory=dict)
    summary: Optional[str] = None


class AnalysisUpdate(BaseModel):
    chart_type: ChartType
    x_axis: str
    y_axis: str
    z_axis: Optional[str] = None
    options: Dict[str, Any] = Field(default_factory=dict)
    summary: Optional[str] = None
