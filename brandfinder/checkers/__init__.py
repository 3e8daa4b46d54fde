from .dns_checker import DNSChecker
from .whois_checker import WhoisChecker
from .availability_service import AvailabilityOracle, AvailabilityService, DomainResult

__all__ = ['DNSChecker', 'WhoisChecker', 'AvailabilityOracle', 'AvailabilityService', 'DomainResult']
