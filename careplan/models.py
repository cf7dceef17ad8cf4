from django.db import models


class Counter(models.Model):
    """Auto-increment counter, one row per allocatable entity type."""

    entity_type = models.CharField(max_length=40, primary_key=True)
    value = models.PositiveBigIntegerField(default=0)

    def __str__(self):
        return f"Counter {self.entity_type} = {self.value}"


class EntityRecord(models.Model):
    """A whole entity, stored as JSON under (namespace, key)."""

    namespace = models.CharField(max_length=40)
    key = models.CharField(max_length=64)
    data = models.JSONField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['namespace', 'key'], name='unique_entity_record'),
        ]

    def __str__(self):
        return f"{self.namespace}#{self.key}"


class IndexEntry(models.Model):
    """One child key at a fixed position in a parent's append-only list."""

    relation = models.CharField(max_length=40)
    parent_key = models.CharField(max_length=128)
    position = models.PositiveIntegerField()
    child_key = models.CharField(max_length=64)

    class Meta:
        ordering = ['relation', 'parent_key', 'position']
        constraints = [
            models.UniqueConstraint(
                fields=['relation', 'parent_key', 'position'],
                name='unique_index_position',
            ),
        ]

    def __str__(self):
        return f"{self.relation}[{self.parent_key}][{self.position}] -> {self.child_key}"
