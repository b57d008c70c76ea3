# Multiple Game Install package
# Batch-installs the games selected in the host library, one at a time.

from .models import SelectableItem, BatchSelection, BatchDecision, BatchStatus, BatchOutcome, MenuItem
from .selection import classify, build_menu_items, confirmation_message, menu_label

PLUGIN_ID = "51a2784a-3dec-442c-841f-ad2cfab92363"
PLUGIN_TITLE = "Multiple Game Install Plugin"
