"""Cookie scoping by registrable domain, using the public suffix list."""

import logging
from http.cookiejar import Cookie, CookieJar, DefaultCookiePolicy, eff_request_host
from urllib.request import Request

import tldextract

logger = logging.getLogger(__name__)

# Bundled suffix list snapshot only, never fetched over the network.
_EXTRACT = tldextract.TLDExtract(suffix_list_urls=())


def registrable_domain(host: str) -> str:
    """Return the registrable domain of *host*.

    ``"a.b.example.co.uk"`` -> ``"example.co.uk"``. Hosts without a known
    suffix (``localhost``, IP addresses) are their own registrable domain.
    A host that is itself a public suffix returns ``""``.
    """
    host = host.lower().strip(".")
    ext = _EXTRACT(host)
    if not ext.suffix:
        return ext.domain or host
    if not ext.domain:
        return ""
    return f"{ext.domain}.{ext.suffix}"


def _request_site(request: Request) -> str:
    # eff_request_host appends ".local" to dotless hosts, as cookie domains do
    _, erhn = eff_request_host(request)
    return registrable_domain(erhn)


class PublicSuffixCookiePolicy(DefaultCookiePolicy):
    """Cookie policy that refuses to let cookies cross registrable domains.

    On top of the standard RFC 2965/Netscape checks, a cookie is only stored
    when its domain is a registrable domain (not a public suffix such as
    ``me.uk``) matching the responding host's. Standard domain matching on
    the way out then shares ``example.com`` cookies between ``a.example.com``
    and ``b.example.com`` while ``example.org`` never sees them.
    """

    def set_ok_domain(self, cookie: Cookie, request: Request) -> bool:
        if not super().set_ok_domain(cookie, request):
            return False

        cookie_site = registrable_domain(cookie.domain)
        if not cookie_site:
            logger.debug(
                "Rejecting cookie %s for public suffix %s", cookie.name, cookie.domain
            )
            return False

        if cookie_site != _request_site(request):
            logger.debug(
                "Rejecting cross-site cookie %s for %s", cookie.name, cookie.domain
            )
            return False
        return True


def new_cookie_jar() -> CookieJar:
    return CookieJar(policy=PublicSuffixCookiePolicy())
