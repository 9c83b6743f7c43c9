from soniccompass.providers.event.ticketmaster_provider import TicketmasterEventProvider

__all__ = ["TicketmasterEventProvider"]
