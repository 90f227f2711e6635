import argparse
import random
from typing import Optional

import matplotlib.pyplot as plt
import pandas as pd

from . import des

# Functions measuring diffusion of single bit flips

def bit_distance(a: bytes, b: bytes) -> int:
    return bin(int.from_bytes(a, 'big') ^ int.from_bytes(b, 'big')).count('1')


def flip_bit(data: bytes, bit: int) -> bytes:
    """
    Flip one bit of a byte string, counting from the MSB of the first byte.
    """
    buf = bytearray(data)
    buf[bit >> 3] ^= 0x80 >> (bit & 7)
    return bytes(buf)


def plaintext_avalanche(trials: int, rng: random.Random) -> pd.DataFrame:
    """
    Average number of ciphertext bits that change when one plaintext bit
    flips, for each of the 64 plaintext bit positions.
    """
    totals = [0] * 64
    for _ in range(trials):
        key = rng.randbytes(des.KEY_SIZE)
        block = rng.randbytes(des.BLOCK_SIZE)
        schedule = des.deskey(key, True)
        base = des.des(schedule, block)
        for bit in range(64):
            totals[bit] += bit_distance(base, des.des(schedule, flip_bit(block, bit)))
        schedule.erase()

    return pd.DataFrame({
        'Bit': range(64),
        'Changed_Bits': [t / trials for t in totals],
    })


def key_avalanche(trials: int, rng: random.Random) -> pd.DataFrame:
    """
    Average number of ciphertext bits that change when one key bit flips.

    The top bit of each key byte is never read by the key schedule, so those
    eight positions come out as zero.
    """
    totals = [0] * 64
    for _ in range(trials):
        key = rng.randbytes(des.KEY_SIZE)
        block = rng.randbytes(des.BLOCK_SIZE)
        base = des.encrypt_block(block, key)
        for bit in range(64):
            totals[bit] += bit_distance(base, des.encrypt_block(block, flip_bit(key, bit)))

    return pd.DataFrame({
        'Bit': range(64),
        'Changed_Bits': [t / trials for t in totals],
    })


def effective_key(key: bytes) -> bytes:
    return bytes(b & 0x7f for b in key)


def cross_key_recoveries(samples: int, rng: random.Random) -> int:
    """
    Encrypt under one key, decrypt under another, and count how often the
    original block comes back. Keys that only differ in ignored bits are
    skipped, since they are the same key.
    """
    hits = 0
    done = 0
    while done < samples:
        key_a = rng.randbytes(des.KEY_SIZE)
        key_b = rng.randbytes(des.KEY_SIZE)
        if effective_key(key_a) == effective_key(key_b):
            continue
        block = rng.randbytes(des.BLOCK_SIZE)
        if des.decrypt_block(des.encrypt_block(block, key_a), key_b) == block:
            hits += 1
        done += 1
    return hits


def plot_avalanche(plaintext_df: pd.DataFrame, key_df: pd.DataFrame,
                   output: Optional[str] = None) -> None:
    plt.figure(figsize=(10, 5))
    plt.plot(plaintext_df['Bit'], plaintext_df['Changed_Bits'], marker='o',
             linestyle='-', color='red', label='Plaintext bit flipped')
    plt.plot(key_df['Bit'], key_df['Changed_Bits'], marker='s',
             linestyle='--', color='blue', label='Key bit flipped')
    plt.axhline(32, color='grey', linestyle=':', linewidth=1)

    plt.xlabel('Flipped Bit Position (MSB first)', fontsize=12)
    plt.ylabel('Ciphertext Bits Changed (mean)', fontsize=12)

    plt.ylim(0, 64)
    plt.xlim(0, 63)

    plt.grid(True, linestyle='--', alpha=0.7)
    plt.legend()

    plt.tight_layout()
    if output:
        plt.savefig(output)
    else:
        plt.show()

#
# Run code
#

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description='Measure diffusion of the VNC DES variant.')
    parser.add_argument('--trials', type=int, default=50)
    parser.add_argument('--samples', type=int, default=1000)
    parser.add_argument('--seed', type=int, default=None)
    parser.add_argument('--output', help='save the plot instead of showing it')
    args = parser.parse_args()

    rng = random.Random(args.seed)

    print(f"Flipping each plaintext bit over {args.trials} random blocks...")
    pt_df = plaintext_avalanche(args.trials, rng)
    print(f"Mean ciphertext bits changed: {pt_df['Changed_Bits'].mean():.2f}/64")

    print(f"Flipping each key bit over {args.trials} random keys...")
    key_df = key_avalanche(args.trials, rng)
    ignored = key_df.loc[key_df['Changed_Bits'] == 0, 'Bit'].tolist()
    print(f"Key bits with no effect: {ignored}")

    print(f"Decrypting {args.samples} blocks under a different key...")
    print(f"Blocks recovered with the wrong key: {cross_key_recoveries(args.samples, rng)}")

    plot_avalanche(pt_df, key_df, args.output)
