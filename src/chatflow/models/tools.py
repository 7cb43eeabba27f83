"""
Tool service wire models.

Response shapes of the vehicle registry (DVSA vehicle enquiry) and the licence
plate recognition (ALPR) services. Only the fields that are read are required.
"""

from pydantic import BaseModel, ConfigDict, Field


class VehicleResponse(BaseModel):
    """Vehicle enquiry record returned by the registry."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    registration_number: str = Field(alias="registrationNumber")
    tax_status: str | None = Field(default=None, alias="taxStatus")
    mot_status: str | None = Field(default=None, alias="motStatus")
    make: str | None = None
    year_of_manufacture: int | None = Field(default=None, alias="yearOfManufacture")
    fuel_type: str | None = Field(default=None, alias="fuelType")
    colour: str | None = None


class BoundingBox(BaseModel):
    x1: int
    y1: int
    x2: int
    y2: int


class Detection(BaseModel):
    label: str = ""
    confidence: float = 0.0
    bounding_box: BoundingBox | None = None


class OCR(BaseModel):
    """Recognised plate text; ``text`` is the registration ID."""

    text: str = ""
    confidence: float = 0.0


class ALPRResult(BaseModel):
    detection: Detection | None = None
    ocr: OCR = Field(default_factory=OCR)


class ProcessImageRequest(BaseModel):
    image_base64: str


class ProcessImageResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str = ""
    size_bytes: int = 0
    inferred_mime_type: str = ""
    alpr_results: list[ALPRResult] = Field(default_factory=list)
