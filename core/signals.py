from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver
from loguru import logger

from core.references import delete_references, resync_mentions, sync_references
from core.registry import kind_for_model


@receiver(post_save)
def sync_references_on_save(sender, instance, created, raw=False, **kwargs):
    """
    Refresh the stored references of any content entity after it is saved,
    and of entities that mention it by name.
    """
    if raw:
        return
    kind = kind_for_model(sender)
    if kind is None:
        return

    count = sync_references(instance, kind)
    resynced = resync_mentions(instance, kind)
    logger.debug(
        "Synced references",
        content_type=kind.key,
        content_id=instance.pk,
        references=count,
        mentions_resynced=resynced,
    )


@receiver(post_delete)
def drop_references_on_delete(sender, instance, **kwargs):
    kind = kind_for_model(sender)
    if kind is not None:
        delete_references(instance, kind)
