"""
Service orchestration for the EO1 Web Controller
"""

from .controller_server import ControllerServer, create_components

__all__ = ['ControllerServer', 'create_components']
