# unicensus/domain/checklist.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .entities import Bathroom

CATEGORY_ORDER = ["Structural", "Sanitary", "Heating", "Accessibility"]


@dataclass(frozen=True)
class ChecklistItem:
    id: str
    category: str
    label: str
    is_cleaning: bool = False


CHECKLIST_ITEMS: tuple[ChecklistItem, ...] = (
    # Structural
    ChecklistItem("ceiling", "Structural", "Ceiling / false ceiling (leaks, detachment)"),
    ChecklistItem("floor", "Structural", "Floor (integrity, breakage)"),
    ChecklistItem("floor_clean", "Structural", "Floor cleaning", is_cleaning=True),
    ChecklistItem("cladding", "Structural", "Wall tiles (integrity)"),
    ChecklistItem("cladding_clean", "Structural", "Wall tile cleaning (grout)", is_cleaning=True),
    ChecklistItem("walls", "Structural", "Walls (plaster, paint)"),
    ChecklistItem("walls_clean", "Structural", "Wall cleaning (graffiti, stains)", is_cleaning=True),
    ChecklistItem("window", "Structural", "Window / frames"),
    ChecklistItem("door", "Structural", "Door / handle"),
    # Sanitary
    ChecklistItem("sink", "Sanitary", "Sink (tap, drain)"),
    ChecklistItem("bidet", "Sanitary", "Bidet"),
    ChecklistItem("toilet", "Sanitary", "WC / seat / flush"),
    ChecklistItem("shower", "Sanitary", "Shower / cubicle (tray, head)"),
    ChecklistItem("shower_clean", "Sanitary", "Shower cleaning (limescale, mould)", is_cleaning=True),
    # Heating
    ChecklistItem("radiator", "Heating", "Radiator"),
    ChecklistItem("radiator_finish", "Heating", "Radiator finishes (rosettes)"),
    ChecklistItem("thermostatic_valve", "Heating", "Thermostatic valve"),
    ChecklistItem("boiler", "Heating", "Water heater"),
    # Accessibility (Disabled bathrooms only)
    ChecklistItem("acc_door", "Accessibility", "Entrance door (clear width >= 80cm, opens outward)"),
    ChecklistItem("acc_maneuver", "Accessibility", "Manoeuvring space (150cm turning circle or side approach)"),
    ChecklistItem("acc_wc_pos", "Accessibility", "WC height 45-50cm and axis > 40cm from wall"),
    ChecklistItem("acc_wc_space", "Accessibility", "WC side transfer space (min 100cm)"),
    ChecklistItem("acc_bars", "Accessibility", "Grab bars (h 80cm, horizontal or fold-down)"),
    ChecklistItem("acc_sink_struct", "Accessibility", "Wall-hung basin (rim h 80cm, knee clearance)"),
    ChecklistItem("acc_tap", "Accessibility", "Tap (long clinical lever or sensor)"),
    ChecklistItem("acc_mirror_h", "Accessibility", "Mirror (tilting or lower edge < 90cm)"),
    ChecklistItem("acc_alarm_cord", "Accessibility", "Alarm pull cord (reaches floor)"),
)

_BY_ID = {i.id: i for i in CHECKLIST_ITEMS}
ITEM_IDS = frozenset(_BY_ID)


def get_item(item_id: str) -> Optional[ChecklistItem]:
    return _BY_ID.get(item_id)


def item_label(item_id: str) -> str:
    item = get_item(item_id)
    return item.label if item else item_id


def checklist_for(bathroom: Optional[Bathroom]) -> list[ChecklistItem]:
    """Items applicable to the bathroom. Accessibility items only apply to Disabled bathrooms."""
    disabled = bathroom is not None and bathroom.gender == "Disabled"
    items = [i for i in CHECKLIST_ITEMS if i.category != "Accessibility" or disabled]
    return sorted(items, key=lambda i: CATEGORY_ORDER.index(i.category))
