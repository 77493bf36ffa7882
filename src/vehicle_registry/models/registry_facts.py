"""
Registry Fact Models

Pydantic model for the DVLA Vehicle Enquiry Service response.
"""
from datetime import date
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.vehicle_registry.transformers.registration import normalize_registration


class RegistryFacts(BaseModel):
    """
    Vehicle facts returned by the registry for one plate.

    Field aliases follow the camelCase wire format; raw_data keeps the payload
    exactly as received so nothing the model drops is lost.

    Attributes:
        registration_number: Plate the registry answered for
        mot_status: Roadworthiness status ("Valid", "Not valid", "No details held by DVLA", ...)
        mot_expiry_date: Date the current MOT expires
        tax_status: Taxation status ("Taxed", "SORN", "Untaxed")
        tax_due_date: Date vehicle tax is next due
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    registration_number: str = Field(..., alias="registrationNumber", description="Registration plate")
    make: Optional[str] = Field(None, description="Manufacturer")
    colour: Optional[str] = Field(None, description="Body colour")
    fuel_type: Optional[str] = Field(None, alias="fuelType", description="Fuel type")
    year_of_manufacture: Optional[int] = Field(None, alias="yearOfManufacture", ge=1880, le=2100)
    engine_capacity: Optional[int] = Field(None, alias="engineCapacity", ge=0, description="cc")
    co2_emissions: Optional[int] = Field(None, alias="co2Emissions", ge=0, description="g/km")
    mot_status: Optional[str] = Field(None, alias="motStatus")
    mot_expiry_date: Optional[date] = Field(None, alias="motExpiryDate")
    tax_status: Optional[str] = Field(None, alias="taxStatus")
    tax_due_date: Optional[date] = Field(None, alias="taxDueDate")
    type_approval: Optional[str] = Field(None, alias="typeApproval")
    wheelplan: Optional[str] = Field(None)
    revenue_weight: Optional[int] = Field(None, alias="revenueWeight", ge=0, description="kg")
    marked_for_export: Optional[bool] = Field(None, alias="markedForExport")
    date_of_last_v5c_issued: Optional[date] = Field(None, alias="dateOfLastV5CIssued")
    month_of_first_registration: Optional[str] = Field(None, alias="monthOfFirstRegistration")

    raw_data: Dict[str, Any] = Field(default_factory=dict, exclude=True)

    @field_validator("registration_number")
    @classmethod
    def normalize_plate(cls, v: str) -> str:
        """Registry plates are stored normalized."""
        normalized = normalize_registration(v)
        if not normalized:
            raise ValueError("registrationNumber is blank")
        return normalized

    @classmethod
    def from_response(cls, payload: Any) -> "RegistryFacts":
        """
        Validate a decoded JSON response body.

        Raises:
            pydantic.ValidationError: if the body is not a usable fact sheet
        """
        facts = cls.model_validate(payload)
        facts.raw_data = dict(payload)
        return facts

    def to_record_values(self) -> Dict[str, Any]:
        """Column values for registry_records (everything except keys and timestamps)."""
        return {
            "make": self.make,
            "colour": self.colour,
            "fuel_type": self.fuel_type,
            "year_of_manufacture": self.year_of_manufacture,
            "engine_capacity": self.engine_capacity,
            "co2_emissions": self.co2_emissions,
            "mot_status": self.mot_status,
            "mot_expiry_date": self.mot_expiry_date,
            "tax_status": self.tax_status,
            "tax_due_date": self.tax_due_date,
            "type_approval": self.type_approval,
            "wheelplan": self.wheelplan,
            "revenue_weight": self.revenue_weight,
            "marked_for_export": self.marked_for_export,
            "date_of_last_v5c_issued": self.date_of_last_v5c_issued,
            "month_of_first_registration": self.month_of_first_registration,
            "raw_data": self.raw_data,
        }
