from reports.itsm_metrics import (
	IncidentTrendAreaCard,
	SlaComplianceLineCard,
	PriorityDistributionCard,
	ResolutionTimesBarCard,
	StatusOverviewCard,
)


ALL_DASHBOARD_CARDS = [
	IncidentTrendAreaCard,
	SlaComplianceLineCard,
	PriorityDistributionCard,
	ResolutionTimesBarCard,
	StatusOverviewCard,
]
