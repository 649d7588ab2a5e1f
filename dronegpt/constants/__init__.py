from .flight_controller import FCKeys, STICK_MIN, STICK_MAX
from .model_api import ModelAPIConstants

__all__ = ['FCKeys', 'STICK_MIN', 'STICK_MAX', 'ModelAPIConstants']
