from functools import lru_cache
from app.services.gateway import StripeGateway


@lru_cache()
def get_gateway() -> StripeGateway:
    """
    Stripe adapter shared by all requests.
    Tests override this dependency with an in-process fake.
    """
    return StripeGateway()


def schedule_side_effects(background_tasks, session_factory, effects):
    """Run best-effort follow-ups after the response, each with its own session."""
    for effect in effects:
        background_tasks.add_task(effect.func, session_factory, *effect.args)
