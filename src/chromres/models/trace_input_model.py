import pandera as pa
from pandera.typing import Series


class TraceInput(pa.DataFrameModel):
    time: Series[float] = pa.Field()
    intensity: Series[float] = pa.Field()

    @pa.check("time", name="time_non_decreasing")
    def time_non_decreasing(cls, time: Series[float]) -> bool:
        return bool(time.is_monotonic_increasing)

    class Config:
        coerce = True
