import logging

from app.application.dtos.booking_dto import HashResolution
from app.application.interfaces.supplier_gateway import HotelSupplierGateway


class RateHashResolver:
    """
    Canjea el match hash de la búsqueda por un book hash estable.

    Cualquier fallo del prebook (rechazo, respuesta sin book hash, error de
    red o circuito abierto) se clasifica como hash expirado. Nunca lanza.
    """

    def __init__(self, supplier_gateway: HotelSupplierGateway) -> None:
        self._supplier_gateway = supplier_gateway
        self._logger = logging.getLogger(__name__)

    async def resolve(self, match_hash: str, language: str = "en") -> HashResolution:
        try:
            result = await self._supplier_gateway.prebook(match_hash, language=language)
        except Exception as exc:
            self._logger.warning(
                "Prebook error, treating rate hash as expired",
                extra={"match_hash": match_hash, "error": str(exc)},
            )
            return HashResolution(expired=True, reason=str(exc) or exc.__class__.__name__)

        if not result.success or not result.book_hash:
            reason = result.error or "prebook returned no book_hash"
            self._logger.warning(
                "Prebook failed, rate hash may be expired",
                extra={"match_hash": match_hash, "error": reason},
            )
            return HashResolution(expired=True, reason=reason)

        self._logger.info(
            "Prebook successful",
            extra={"match_hash": match_hash, "book_hash": result.book_hash},
        )
        return HashResolution(book_hash=result.book_hash)
