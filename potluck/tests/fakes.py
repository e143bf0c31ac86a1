"""In-memory stand-ins used by the slot engine and board tests."""

from potluck.models.category import Category
from potluck.models.registration import Registration


def make_category(category_id=1, slots=3, is_unbounded=False, **fields):
    """Build an unsaved Category with a fixed id."""
    fields.setdefault("name", f"Category {category_id}")
    fields.setdefault("storage_key", f"category_{category_id}")
    return Category(id=category_id, slots=slots, is_unbounded=is_unbounded, **fields)


class FakeStore:
    """In-memory stand-in for RegistrationStore.

    Records every call and can be told to fail, so engine behaviour can be
    checked without a database.
    """

    def __init__(self):
        self.rows = {}
        self.saves = []
        self.deletes = []
        self.fail_saves = False
        self.fail_deletes = False
        self._next_id = 1

    def save(
        self,
        category_id,
        name,
        description,
        slot_number=None,
        registration_id=None,
        gif_url=None,
    ):
        self.saves.append(
            dict(
                category_id=category_id,
                name=name,
                description=description,
                slot_number=slot_number,
                registration_id=registration_id,
            )
        )
        if self.fail_saves:
            return None
        if registration_id is None or registration_id not in self.rows:
            registration_id = self._next_id
            self._next_id += 1
        row = make_registration(
            registration_id,
            category_id=category_id,
            name=name,
            description=description,
            slot_number=slot_number,
        )
        self.rows[registration_id] = row
        return row

    def delete(self, registration_id):
        self.deletes.append(registration_id)
        if self.fail_deletes:
            return False
        self.rows.pop(registration_id, None)
        return True


def make_registration(
    registration_id,
    slot_number=None,
    category_id=1,
    name="Guest",
    description="Something",
    created_at=None,
):
    """Build an unsaved Registration with a fixed id."""
    return Registration(
        id=registration_id,
        potluck_id=1,
        category_id=category_id,
        name=name,
        description=description,
        slot_number=slot_number,
        created_at=created_at,
    )
