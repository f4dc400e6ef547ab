"""
LIGHTBOX IMAGE EDITOR - Memory Manager

Check system memory before full-resolution processing.
"""

import psutil


class MemoryManager:
    """Estimate bake memory and compare it against what the system has free."""

    # float32 RGBA working array: 4 channels x 4 bytes per float
    BYTES_PER_PIXEL = 16

    # Reserve this much RAM for system/Qt/other processes
    SAFETY_MARGIN_GB = 0.5

    # Working copies alive at the pipeline peak (float RGB, HSL, band masks)
    WORKING_COPIES = 4

    def get_available_memory_gb(self) -> float:
        """Get current available memory in GB."""
        return psutil.virtual_memory().available / (1024 ** 3)

    def get_total_memory_gb(self) -> float:
        """Get total system memory in GB."""
        return psutil.virtual_memory().total / (1024 ** 3)

    def estimate_image_memory_mb(self, width: int, height: int) -> float:
        """Estimate memory for one float working copy of an image in MB."""
        pixels = width * height
        return (pixels * self.BYTES_PER_PIXEL) / (1024 ** 2)

    def can_process_image(self, width: int, height: int) -> bool:
        """Check if we have enough memory to bake an image of given size."""
        required_mb = self.estimate_image_memory_mb(width, height)
        required_gb = (required_mb * self.WORKING_COPIES) / 1024
        available_gb = self.get_available_memory_gb()
        return available_gb > (required_gb + self.SAFETY_MARGIN_GB)

    def get_resource_summary(self) -> dict:
        """Get a summary of available resources for display."""
        return {
            'total_memory_gb': round(self.get_total_memory_gb(), 1),
            'available_memory_gb': round(self.get_available_memory_gb(), 1),
        }
