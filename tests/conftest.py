"""Root test configuration: a small sample vault shared by integration tests"""

import pytest


JOURNAL_MD = """\
---
title: Session One
tags: [session]
---

# Session One

Kira faces the storm. `iv-move:Face Danger|edge|4|3|0|3|5`

Momentum rises: `iv-meter:Momentum|2|5`

`iv-track-advance:Find the Relic|Find the Relic|4|12|dangerous|1`

```iron-vault-mechanics
move "[Face Danger](datasworn:move:starforged/adventure/face_danger)" {
    roll "Edge" action=4 adds=0 stat=3 vs1=3 vs2=5
}
progress name="[[Progress/Find the Relic.md|Find the Relic]]" rank=dangerous steps=2 from=3
```

```dataview
TABLE rank, status FROM #quest WHERE status != "done" SORT file.name ASC
```
"""

RELIC_MD = """\
---
tags: [quest]
rank: dangerous
status: active
---
Progress track for the relic.
"""

BEACON_MD = """\
---
tags: quest
rank: formidable
status: done
---
Progress track for the beacon.
"""


@pytest.fixture(name="vault")
def vault_fixture(tmp_path):
    """A vault with a journal page and two quest progress tracks."""
    root = tmp_path / "vault"
    (root / "Progress").mkdir(parents=True)
    (root / "Journal.md").write_text(JOURNAL_MD, encoding="utf-8")
    (root / "Progress" / "Find the Relic.md").write_text(RELIC_MD, encoding="utf-8")
    (root / "Progress" / "Light the Beacon.md").write_text(BEACON_MD, encoding="utf-8")
    return root
