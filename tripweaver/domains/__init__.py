"""Domain modules - Business logic organized by bounded contexts.

Note: Domain modules are imported lazily to avoid circular imports.
Import them directly where needed:

    from tripweaver.domains.itinerary.schemas import DailyPlan, ItineraryItem
    from tripweaver.domains.itinerary.services import ItineraryService
"""
