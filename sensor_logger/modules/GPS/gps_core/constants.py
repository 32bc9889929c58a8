"""GPS recording constants and configuration defaults."""

# Sensor identity used for capture file naming
SENSOR_NAME = "gps"
CSV_EXTENSION = "csv"
RAW_SENSOR_INFO_CATEGORY = "raw-sensor-info"

# Provider subscription cadence: time-rate-limited, up to 10 Hz
MIN_TIME_MS = 100
MIN_DISTANCE_M = 0.0

CSV_SEPARATOR = ","
CSV_LINE_TERMINATOR = "\n"

GPS_CSV_HEADER = [
    "latitude",
    "longitude",
    "altitude",
    "accuracy",
    "speed",
    "bearing",
    "timestamp_ns",
]

# Wall-clock milliseconds -> approximate nanoseconds
NS_PER_MS = 1_000_000
