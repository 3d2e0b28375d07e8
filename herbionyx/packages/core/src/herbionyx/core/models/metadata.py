"""链下元数据 -- 按事件类型区分的 tagged union

元数据以 JSON 形式固定在 IPFS 上，type 字段决定具体结构。
溯源引擎不读取元数据，只有调用方在拿到结构结果后才会合并。
未知字段保留，解析失败时由调用方保留原始 dict。
"""

from typing import Annotated, Any, Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

log = structlog.get_logger()


class _MetadataBase(BaseModel):
    """所有元数据共有字段"""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    timestamp: str = Field(default="", description="元数据生成时间（ISO 8601）")
    batch_id: str = Field(default="", alias="batchId")
    notes: str = Field(default="")
    images: list[str] = Field(default_factory=list, description="图片的 IPFS 哈希")


class MetadataLocation(BaseModel):
    """元数据中的地点描述"""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    latitude: str | float = ""
    longitude: str | float = ""
    zone: str = ""
    address: str = ""


class CollectionMetadata(_MetadataBase):
    """采集事件元数据"""

    type: Literal["collection"]
    herb_species: str = Field(default="", alias="herbSpecies")
    collector: str = ""
    weight: float | None = None
    harvest_date: str = Field(default="", alias="harvestDate")
    location: MetadataLocation | None = None
    quality_grade: str = Field(default="", alias="qualityGrade")


class QualityTestResults(BaseModel):
    """质检结果"""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    moisture_content: float | None = Field(default=None, alias="moistureContent")
    purity: float | None = None
    pesticide_level: float | None = Field(default=None, alias="pesticideLevel")
    heavy_metals: dict[str, Any] = Field(default_factory=dict, alias="heavyMetals")
    microbiological: dict[str, Any] = Field(default_factory=dict)
    active_compounds: dict[str, Any] = Field(default_factory=dict, alias="activeCompounds")


class QualityTestMetadata(_MetadataBase):
    """质检事件元数据"""

    type: Literal["quality_test"]
    event_id: str = Field(default="", alias="eventId")
    parent_event_id: str = Field(default="", alias="parentEventId")
    tester: str = ""
    test_results: QualityTestResults = Field(
        default_factory=QualityTestResults,
        alias="testResults",
    )
    test_method: str = Field(default="", alias="testMethod")
    test_date: str = Field(default="", alias="testDate")
    certification: str = ""


class ProcessingDetails(BaseModel):
    """加工参数"""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    method: str = ""
    temperature: float | None = None
    duration: str = ""
    yield_amount: float | None = Field(default=None, alias="yield")
    conditions: str = ""


class ProcessingMetadata(_MetadataBase):
    """加工事件元数据"""

    type: Literal["processing"]
    event_id: str = Field(default="", alias="eventId")
    parent_event_id: str = Field(default="", alias="parentEventId")
    processor: str = ""
    processing_details: ProcessingDetails = Field(
        default_factory=ProcessingDetails,
        alias="processingDetails",
    )


class ProductInfo(BaseModel):
    """成品信息"""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = ""
    form: str = ""
    quantity: float | None = None
    unit: str = ""
    batch_number: str = Field(default="", alias="batchNumber")
    expiry_date: str = Field(default="", alias="expiryDate")


class ManufacturingMetadata(_MetadataBase):
    """制造事件元数据"""

    type: Literal["manufacturing"]
    event_id: str = Field(default="", alias="eventId")
    parent_event_id: str = Field(default="", alias="parentEventId")
    manufacturer: str = ""
    product: ProductInfo = Field(default_factory=ProductInfo)


EventMetadata = Annotated[
    CollectionMetadata | QualityTestMetadata | ProcessingMetadata | ManufacturingMetadata,
    Field(discriminator="type"),
]

_metadata_adapter: TypeAdapter[EventMetadata] = TypeAdapter(EventMetadata)


def parse_metadata(raw: Any) -> EventMetadata | None:
    """将 IPFS 返回的 JSON 解析为对应的元数据变体

    Returns:
        解析后的元数据；不匹配任何变体时返回 None
    """
    if not isinstance(raw, dict):
        return None
    try:
        return _metadata_adapter.validate_python(raw)
    except ValidationError as e:
        log.debug(
            "metadata_shape_unrecognized",
            metadata_type=raw.get("type"),
            error_count=e.error_count(),
        )
        return None
