"""
Admission checks applied around the OAuth flow.

Both checks are open by default: with no allow-list configured every caller
is admitted.
"""

import ipaddress
import logging

from .errors import DomainNotAllowed, InvalidIP, IPNotAllowed, MissingParameter
from .validators import validate_required

logger = logging.getLogger(__name__)


def is_valid_ip(ip):
    """
    Check whether a string is a valid IPv4 or IPv6 address.

    Surrounding whitespace and an IPv6 zone suffix (``fe80::1%eth0``) are
    accepted.
    """
    if not isinstance(ip, str):
        return False
    try:
        ipaddress.ip_address(ip.strip())
    except ValueError:
        return False
    return True


def check_ip(ip, allowed_ips):
    """
    Check the request source IP against the IP allow-list.

    Args:
        ip: Source IP of the request
        allowed_ips: Allowed IP addresses; empty means unrestricted

    Raises:
        InvalidIP: If the IP is not a valid IPv4 or IPv6 address
        IPNotAllowed: If the IP is not in the allow-list
    """
    if not allowed_ips:
        logger.debug("No IP restriction configured, admitting all IPs")
        return

    if not is_valid_ip(ip):
        logger.error(f"IP {ip} is not a valid IP")
        raise InvalidIP()

    if ip not in allowed_ips:
        logger.warning(f"IP {ip} is not on the allow-list")
        raise IPNotAllowed()

    logger.debug(f"IP {ip} is on the allow-list")


def check_domain(account, allowed_domains):
    """
    Check that an account belongs to one of the allowed email domains.

    Args:
        account: Email address of the authenticated user
        allowed_domains: Allowed domain suffixes such as ``@example.com``;
            empty means unrestricted

    Raises:
        MissingParameter: If domain restriction is on and account is empty
        DomainNotAllowed: If the account matches none of the suffixes
    """
    if not allowed_domains:
        logger.debug("No domain restriction configured, admitting all accounts")
        return

    validate_required(account, 'account', error=MissingParameter)

    if any(account.endswith(domain) for domain in allowed_domains):
        logger.debug(f"Account {account} is in an accepted domain")
        return

    logger.warning(f"Account {account} is not in an accepted domain: {allowed_domains}")
    raise DomainNotAllowed()


def denial_message(allowed_domains):
    """Build the message shown to a user whose account was not admitted."""
    domains = ' or '.join(allowed_domains) if allowed_domains else 'organization'
    return (
        "Access denied. Please log out of your Google account in this browser "
        f"and log back in using your {domains} account."
    )
