from protean.exceptions import ObjectNotFoundError

from delivery.bordereau.bordereau import Bordereau
from delivery.domain import delivery


@delivery.repository(part_of=Bordereau)
class BordereauRepository:
    def find_by_code(self, code: str) -> Bordereau | None:
        return self._dao.query.filter(code=code).all().first

    def get_by_code(self, code: str) -> Bordereau:
        bordereau = self.find_by_code(code)
        if bordereau is None:
            raise ObjectNotFoundError({"bordereau": [f"Bordereau '{code}' does not exist"]})
        return bordereau
