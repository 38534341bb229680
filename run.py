"""启动脚本"""

import uvicorn
from data_segmenter.core.config import settings
from data_segmenter.utils.logger import log


if __name__ == "__main__":
    log.info("="*60)
    log.info("Data Segmenter - 启动中")
    log.info("="*60)
    log.info(f"服务地址: http://{settings.api_host}:{settings.api_port}")
    log.info(f"API 文档: http://{settings.api_host}:{settings.api_port}/docs")
    log.info(f"调试模式: {settings.debug}")
    log.info(f"K-Means 最大迭代: {settings.kmeans_max_iterations}")
    log.info("="*60)

    uvicorn.run(
        "data_segmenter.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level="info"
    )
