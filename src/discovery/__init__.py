"""
Discovery module for EO1 device discovery
"""

from .models import ScanResult, SubnetDetectionError
from .network_discovery import NetworkDiscovery, validate_subnet_prefix, generate_host_addresses
from .subnet import detect_subnet

__all__ = [
    'NetworkDiscovery', 'ScanResult', 'SubnetDetectionError',
    'validate_subnet_prefix', 'generate_host_addresses', 'detect_subnet'
]
