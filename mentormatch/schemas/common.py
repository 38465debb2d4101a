from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator

from mentormatch.utils.datetime import ensure_aware_utc

# Rows hold naive UTC; clients always get an explicit offset.
UTCDateTime = Annotated[datetime, AfterValidator(ensure_aware_utc)]
