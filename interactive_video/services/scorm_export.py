"""
SCORM Export Service
Packages an interactive video and its element list as a SCORM 1.2 SCO
"""

import html
import json
import logging
import zipfile
from datetime import datetime
from io import BytesIO
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from ..models.interaction import ElementListSnapshot
from ..utils.validation import validate_element_list

logger = logging.getLogger(__name__)

MAX_ELEMENTS = 500
MAX_PACKAGE_MB = 50

REQUIRED_FILES = [
    "imsmanifest.xml",
    "index.html",
    "scripts/api.js",
    "scripts/player.js",
    "styles/main.css",
    "metadata.json",
]


class SCORMExportService:
    """Service for generating SCORM packages from an element list snapshot"""

    def __init__(self):
        self.scorm_version = "1.2"
        self.package_identifier = None

    async def generate_scorm_package(
        self,
        snapshot: ElementListSnapshot,
        video_url: str,
        description: Optional[str] = None,
        duration: Optional[float] = None,
    ) -> BytesIO:
        """
        Generate a complete SCORM package as a ZIP file

        Args:
            snapshot: Elements and settings to package
            video_url: Media source the packaged player will load
            description: Optional video description
            duration: Optional video length in seconds

        Returns:
            BytesIO: ZIP file content
        """
        video_id = snapshot.videoId or "video"
        logger.info(f"Generating SCORM package for video: {video_id}")

        validation_result = self.validate_for_export(snapshot, duration)
        if not validation_result["valid"]:
            raise ValueError(
                "Video validation failed: " + "; ".join(validation_result["errors"])
            )

        self.package_identifier = (
            f"com.interactivevideo.{video_id}.{datetime.now().strftime('%Y%m%d%H%M%S')}"
        )
        title = self._plain_text(snapshot.title) or video_id
        description = self._plain_text(description)

        files: Dict[str, str] = {
            "imsmanifest.xml": self._create_manifest(title),
            "index.html": self._create_index_html(snapshot, title, video_url),
            "scripts/api.js": SCORM_API_JS,
            "scripts/player.js": PLAYER_JS,
            "styles/main.css": PLAYER_CSS,
            "metadata.json": self._create_metadata(
                snapshot, title, description, duration, video_url
            ),
        }
        self._validate_package_structure(files)

        zip_buffer = BytesIO()
        with zipfile.ZipFile(zip_buffer, "w", zipfile.ZIP_DEFLATED) as zip_file:
            for name, content in files.items():
                zip_file.writestr(name, content)

        final_size_mb = len(zip_buffer.getvalue()) / (1024 * 1024)
        if final_size_mb > MAX_PACKAGE_MB:
            raise ValueError(
                f"Final package size ({final_size_mb:.1f}MB) "
                f"exceeds maximum limit of {MAX_PACKAGE_MB}MB"
            )

        zip_buffer.seek(0)
        logger.info("SCORM package generated successfully")
        return zip_buffer

    def _create_manifest(self, title: str) -> str:
        """Create the imsmanifest.xml file required by SCORM"""
        resource_files = "\n".join(
            f'      <file href="{name}"/>' for name in REQUIRED_FILES if name != "imsmanifest.xml"
        )
        return f"""<?xml version="1.0" encoding="UTF-8"?>
<manifest identifier="{self._escape_xml(self.package_identifier)}" version="1.0"
          xmlns="http://www.imsproject.org/xsd/imscp_rootv1p1p2"
          xmlns:adlcp="http://www.adlnet.org/xsd/adlcp_rootv1p2"
          xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
          xsi:schemaLocation="http://www.imsproject.org/xsd/imscp_rootv1p1p2 imscp_rootv1p1p2.xsd
                              http://www.imsglobal.org/xsd/imsmd_rootv1p2p1 imsmd_rootv1p2p1.xsd
                              http://www.adlnet.org/xsd/adlcp_rootv1p2 adlcp_rootv1p2.xsd">
  <metadata>
    <schema>ADL SCORM</schema>
    <schemaversion>{self.scorm_version}</schemaversion>
  </metadata>
  <organizations default="interactive_video_org">
    <organization identifier="interactive_video_org">
      <title>{self._escape_xml(title)}</title>
      <item identifier="item_1" identifierref="resource_1">
        <title>{self._escape_xml(title)}</title>
      </item>
    </organization>
  </organizations>
  <resources>
    <resource identifier="resource_1" type="webcontent" adlcp:scormtype="sco" href="index.html">
{resource_files}
    </resource>
  </resources>
</manifest>"""

    def _create_index_html(
        self, snapshot: ElementListSnapshot, title: str, video_url: str
    ) -> str:
        payload = {
            "video": {"id": snapshot.videoId, "title": title, "url": video_url},
            "settings": snapshot.settings.model_dump(mode="json"),
            "elements": [
                self._sanitize_element(e.model_dump(mode="json")) for e in snapshot.elements
            ],
        }
        safe_title = html.escape(title)
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{safe_title}</title>
  <link rel="stylesheet" href="styles/main.css">
  <script src="scripts/api.js"></script>
  <script src="scripts/player.js"></script>
</head>
<body>
  <div class="container">
    <h1>{safe_title}</h1>
    <div class="video-container">
      <video id="video-player" controls>
        <source src="{html.escape(video_url, quote=True)}" type="video/mp4">
        Your browser does not support the video tag.
      </video>
      <div id="interactions-container"></div>
    </div>
    <div id="status-bar"><span id="score-text">0%</span></div>
  </div>
  <script>
    document.addEventListener('DOMContentLoaded', function() {{
      var packageData = {self._script_json(payload)};
      InteractivePlayer.start(packageData);
    }});
  </script>
</body>
</html>"""

    def _create_metadata(
        self,
        snapshot: ElementListSnapshot,
        title: str,
        description: str,
        duration: Optional[float],
        video_url: str,
    ) -> str:
        metadata = {
            "videoId": snapshot.videoId,
            "title": title,
            "description": description,
            "duration": duration,
            "url": video_url,
            "elements": [e.model_dump(mode="json") for e in snapshot.elements],
            "settings": snapshot.settings.model_dump(mode="json"),
            "version": snapshot.version,
            "exportedAt": datetime.utcnow().isoformat(),
        }
        return json.dumps(metadata, indent=2, ensure_ascii=False)

    def _sanitize_element(self, data: Dict[str, Any]) -> Dict[str, Any]:
        data["title"] = self._plain_text(data.get("title"))
        data["description"] = self._plain_text(data.get("description"))
        for option in data.get("options") or []:
            option["text"] = self._plain_text(option.get("text"))
        feedback = data.get("feedback") or {}
        for key in ("correct", "incorrect"):
            if feedback.get(key):
                feedback[key] = self._plain_text(feedback[key])
        return data

    def _validate_package_structure(self, files: Dict[str, str]) -> None:
        """Ensure all required SCORM files are present and non-trivial"""
        missing = [name for name in REQUIRED_FILES if name not in files]
        if missing:
            raise ValueError(
                f"Package validation failed: Missing required files: {', '.join(missing)}"
            )
        manifest = files["imsmanifest.xml"]
        if not manifest.startswith("<?xml") or "<manifest" not in manifest:
            raise ValueError("Manifest validation failed: invalid manifest document")
        for name in ("scripts/api.js", "scripts/player.js"):
            if len(files[name].strip()) < 100:
                raise ValueError(f"JavaScript file {name} appears incomplete")

    def estimate_package_size(self, snapshot: ElementListSnapshot) -> Dict[str, Any]:
        elements_bytes = len(
            json.dumps([e.model_dump(mode="json") for e in snapshot.elements])
        )
        static_bytes = len(SCORM_API_JS) + len(PLAYER_JS) + len(PLAYER_CSS) + 4096
        # element data appears in both index.html and metadata.json
        total = static_bytes + 2 * elements_bytes
        return {
            "elements_bytes": elements_bytes,
            "static_bytes": static_bytes,
            "total_estimated_bytes": total,
            "total_estimated_mb": round(total / (1024 * 1024), 3),
        }

    def validate_for_export(
        self, snapshot: ElementListSnapshot, duration: Optional[float] = None
    ) -> Dict[str, Any]:
        errors: List[str] = []
        warnings: List[str] = []

        if len(snapshot.elements) > MAX_ELEMENTS:
            errors.append(
                f"Video has {len(snapshot.elements)} elements, exceeding maximum of {MAX_ELEMENTS}"
            )
        if not snapshot.elements:
            warnings.append("Video has no interactive elements")

        for issue in validate_element_list(snapshot.elements, duration):
            text = f"{issue.field}: {issue.message}"
            if issue.level == "error":
                errors.append(text)
            else:
                warnings.append(text)

        return {"valid": not errors, "errors": errors, "warnings": warnings}

    def _plain_text(self, text: Any) -> str:
        if not text:
            return ""
        text = str(text)
        if "<" not in text:
            return text.strip()
        return BeautifulSoup(text, "html.parser").get_text(" ", strip=True)

    def _escape_xml(self, text: Any) -> str:
        return html.escape(str(text or ""), quote=True)

    def _script_json(self, data: Any) -> str:
        return json.dumps(data, ensure_ascii=False).replace("</", "<\\/")


SCORM_API_JS = r"""// SCORM 1.2 runtime bridge.
// The LMS API is located once at start-up and wrapped in a session object;
// nothing else in the package touches window.API.
var ScormBridge = (function() {
  var MAX_PARENT_HOPS = 7;

  function findApi(win) {
    var hops = 0;
    while (win.API == null && win.parent != null && win.parent != win) {
      hops++;
      if (hops > MAX_PARENT_HOPS) return null;
      win = win.parent;
    }
    return win.API || null;
  }

  function ok(result) {
    return result === true || String(result).toLowerCase() === 'true';
  }

  function createSession(api) {
    var initialized = false;
    var interactionCount = 0;
    return {
      available: function() { return api != null; },
      initialize: function() {
        if (!api || initialized) return initialized;
        initialized = ok(api.LMSInitialize(''));
        return initialized;
      },
      get: function(key) {
        return initialized ? (api.LMSGetValue(key) || '') : '';
      },
      set: function(key, value) {
        if (!initialized) return false;
        return ok(api.LMSSetValue(key, String(value)));
      },
      commit: function() {
        if (!initialized) return false;
        return ok(api.LMSCommit(''));
      },
      recordInteraction: function(record) {
        var prefix = 'cmi.interactions.' + interactionCount + '.';
        this.set(prefix + 'id', record.id);
        this.set(prefix + 'type', record.type);
        this.set(prefix + 'result', record.result);
        this.set(prefix + 'student_response', record.studentResponse);
        this.set(prefix + 'correct_responses.0.pattern', record.correctResponse);
        interactionCount++;
      },
      finish: function() {
        if (!initialized) return;
        api.LMSCommit('');
        api.LMSFinish('');
        initialized = false;
      }
    };
  }

  return {
    connect: function(win) { return createSession(findApi(win)); }
  };
})();
"""

PLAYER_JS = r"""// Interactive video player: windows are [timestamp, timestamp + duration).
var InteractivePlayer = (function() {
  var SAVE_INTERVAL = 5;

  function start(data) {
    var lms = ScormBridge.connect(window);
    lms.initialize();

    var state = {
      elements: data.elements || [],
      settings: data.settings || {},
      active: [],
      pausedBy: {},
      completed: [],
      held: {},
      ended: false,
      lastSave: 0
    };
    var video = document.getElementById('video-player');
    var container = document.getElementById('interactions-container');

    restore();
    video.addEventListener('timeupdate', function() { tick(video.currentTime); });
    video.addEventListener('pause', save);
    video.addEventListener('ended', function() { state.ended = true; save(); report(); });
    window.addEventListener('beforeunload', function() { save(); report(); lms.finish(); });
    lms.set('cmi.core.lesson_status', status());
    lms.commit();

    function restore() {
      var raw = lms.get('cmi.suspend_data');
      if (!raw) return;
      try {
        var progress = JSON.parse(raw);
        state.completed = progress.completedInteractionIds || [];
        if (progress.currentTime > 0) video.currentTime = progress.currentTime;
      } catch (e) {
        console.warn('Ignoring unreadable suspend data', e);
      }
    }

    function inWindow(el, t) { return t >= el.timestamp && t < el.timestamp + el.duration; }
    function isDone(id) { return state.completed.indexOf(id) !== -1; }
    function find(id) {
      for (var i = 0; i < state.elements.length; i++) {
        if (state.elements[i].id === id) return state.elements[i];
      }
      return null;
    }

    function tick(t) {
      state.active = state.active.filter(function(id) {
        var el = find(id);
        if (el && inWindow(el, t)) return true;
        detach(id);
        return false;
      });
      state.elements.forEach(function(el) {
        if (state.active.indexOf(el.id) !== -1 || isDone(el.id) || !inWindow(el, t)) return;
        state.active.push(el.id);
        attach(el);
        var pause = el.pauseVideo != null ? el.pauseVideo : state.settings.pauseOnInteraction !== false;
        if (pause) { state.pausedBy[el.id] = true; video.pause(); }
      });
      if (t - state.lastSave >= SAVE_INTERVAL || t < state.lastSave) save();
    }

    function attach(el) {
      var node = document.createElement('div');
      node.id = 'interaction-' + el.id;
      node.className = 'interaction ' + el.type;
      var pos = el.position || { x: 50, y: 50 };
      node.style.left = pos.x + '%';
      node.style.top = pos.y + '%';
      if (el.style) Object.keys(el.style).forEach(function(k) { if (el.style[k]) node.style[k] = el.style[k]; });
      var title = document.createElement('h3');
      title.textContent = el.title || '';
      node.appendChild(title);
      var options = el.options || [];
      if (el.type === 'hotspot' && options.length === 0) options = [{ text: '' }];
      options.forEach(function(option, index) {
        var button = document.createElement('button');
        button.className = el.type === 'hotspot' ? 'hotspot-marker' : 'interaction-option';
        button.textContent = option.text;
        button.addEventListener('click', function() { respond(el, index); });
        node.appendChild(button);
      });
      container.appendChild(node);
    }

    function detach(id) {
      var node = document.getElementById('interaction-' + id);
      if (node) node.remove();
      delete state.pausedBy[id];
    }

    function respond(el, index) {
      if (isDone(el.id)) return;
      var option = (el.options || [])[index] || {};
      var result = 'neutral', delta = 1, correct = '';
      if (el.type === 'quiz') {
        result = option.isCorrect ? 'correct' : 'incorrect';
        delta = option.isCorrect ? 1 : 0;
        for (var i = 0; i < el.options.length; i++) {
          if (el.options[i].isCorrect) { correct = String(i); break; }
        }
      } else if (el.type === 'decision') {
        delta = 0;
      }
      state.completed.push(el.id);
      lms.recordInteraction({
        id: el.id, type: el.type, result: result,
        studentResponse: String(index), correctResponse: correct
      });

      var message = null;
      if (state.settings.showFeedback !== false && el.feedback) {
        message = result === 'correct' ? el.feedback.correct : result === 'incorrect' ? el.feedback.incorrect : null;
      }
      var paused = !!state.pausedBy[el.id];
      if (message && paused && !state.settings.autoAdvance) {
        showFeedback(el, message, result);
      } else {
        state.active = state.active.filter(function(id) { return id !== el.id; });
        detach(el.id);
        if (paused) video.play();
      }
      if (el.type === 'decision' && option.action) {
        var jump = /^\s*jump\s*:\s*(\d+(\.\d+)?)\s*$/.exec(option.action);
        if (jump) video.currentTime = parseFloat(jump[1]);
      }
      save();
      report();
    }

    function showFeedback(el, message, result) {
      var node = document.getElementById('interaction-' + el.id);
      if (!node) return;
      node.innerHTML = '';
      var box = document.createElement('div');
      box.className = 'feedback ' + result;
      var text = document.createElement('p');
      text.textContent = message;
      var button = document.createElement('button');
      button.className = 'continue-button';
      button.textContent = 'Continue';
      button.addEventListener('click', function() {
        state.active = state.active.filter(function(id) { return id !== el.id; });
        detach(el.id);
        video.play();
      });
      box.appendChild(text);
      box.appendChild(button);
      node.appendChild(box);
    }

    function counted() {
      return state.elements.filter(function(el) { return isDone(el.id); }).length;
    }
    function score() {
      var total = state.elements.length;
      return total > 0 ? Math.round(100 * counted() / total) : 0;
    }
    function status() {
      var total = state.elements.length;
      if ((total > 0 && counted() >= total) || (total === 0 && state.ended)) return 'completed';
      return 'incomplete';
    }

    function save() {
      state.lastSave = video.currentTime;
      var blob = JSON.stringify({ currentTime: video.currentTime, completedInteractionIds: state.completed });
      if (!(lms.set('cmi.suspend_data', blob) && lms.commit())) {
        console.warn('Progress not saved; continuing without LMS persistence');
      }
    }

    function report() {
      lms.set('cmi.core.lesson_status', status());
      lms.set('cmi.core.score.raw', score());
      lms.commit();
      var label = document.getElementById('score-text');
      if (label) label.textContent = score() + '%';
    }
  }

  return { start: start };
})();
"""

PLAYER_CSS = """body {
  font-family: Arial, sans-serif;
  margin: 0;
  background-color: #f5f5f5;
}

.container {
  max-width: 1200px;
  margin: 0 auto;
  padding: 20px;
}

.video-container {
  position: relative;
  width: 100%;
}

video {
  width: 100%;
  display: block;
}

.interaction {
  position: absolute;
  transform: translate(-50%, -50%);
  background: rgba(255, 255, 255, 0.95);
  border-radius: 8px;
  padding: 16px;
  max-width: 500px;
  z-index: 10;
}

.interaction-option {
  display: block;
  width: 100%;
  margin-top: 8px;
  padding: 8px 12px;
  cursor: pointer;
}

.hotspot-marker {
  width: 32px;
  height: 32px;
  border-radius: 50%;
  background: rgba(37, 99, 235, 0.8);
  border: 2px solid #fff;
  cursor: pointer;
}

.feedback.correct { color: #15803d; }
.feedback.incorrect { color: #b91c1c; }

#status-bar {
  margin-top: 12px;
  text-align: right;
}
"""


# Global service instance
scorm_service = SCORMExportService()
