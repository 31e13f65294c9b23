import pandera as pa
from pandera.typing import Series


class ResolvedPeakTable(pa.DataFrameModel):
    start: Series[float] = pa.Field()
    end: Series[float] = pa.Field()
    window_index: Series[int] = pa.Field(ge=0)
    rank: Series[int] = pa.Field(ge=0)

    @pa.dataframe_check
    def start_not_after_end(cls, df) -> Series[bool]:
        return df["start"] <= df["end"]
