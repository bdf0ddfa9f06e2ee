"""
Tag Resolver

Resolves the authoritative value of a tag for a subject: the most recently
recorded live answer wins.
"""

from livestock.services.fact_store import SCAN_ORDERING, fact_store

NOT_AVAILABLE = 'NA'


class TagResolver:
    """Latest-wins lookup over the fact store."""

    def __init__(self, store=None):
        self.store = store or fact_store

    def resolve_latest(self, subject, tag):
        """Return the newest live answer for subject and tag, or None."""
        return self.store.scan(subject, tag).first()

    def latest_value(self, subject, tag, default=NOT_AVAILABLE):
        answer = self.resolve_latest(subject, tag)
        return answer.value if answer is not None else default

    def resolve_latest_many(self, owner_id, tags, animal_type_id=None):
        """
        Batched resolve over every animal of an owner.

        One query per call; rows arrive newest first, so the first row seen
        for a (animal type, animal number, tag) key is the latest one.

        Returns:
            dict keyed by (animal_type_id, animal_number, tag) -> Answer
        """
        rows = self.store.scan_owner(
            owner_id, tags, animal_type_id=animal_type_id, animals_only=True
        ).order_by('animal_type_id', 'animal_number', 'tag', *SCAN_ORDERING)

        latest = {}
        for answer in rows.iterator():
            key = (answer.animal_type_id, answer.animal_number, answer.tag)
            if key not in latest:
                latest[key] = answer
        return latest

    def latest_for(self, latest, subject, tag):
        """Pick one entry out of a `resolve_latest_many` result."""
        return latest.get((subject.animal_type_id, subject.animal_number, int(tag)))
