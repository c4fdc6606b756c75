from edudata_gateway.models.requests import EducationDataRequest, SummaryDataRequest

__all__ = [
    "EducationDataRequest",
    "SummaryDataRequest",
]
