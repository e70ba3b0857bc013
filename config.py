# config.py

TARGET = "hl"

RANDOM_STATE = 42
TEST_SIZE = 0.25
